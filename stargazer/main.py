"""
Stargazer - Headless Entry Point
================================

Runs one play session without a UI:
- Logging and configuration
- Slot store + persistence gateway
- Catalog, engine and mission tracker
- Energy refill scheduler
- Explore until energy runs out or the catalog is exhausted
- Graceful shutdown

Run with ``python -m stargazer``.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

from stargazer.core.config.config import Config
from stargazer.core.config.manager import ConfigManager, ProgressionSettings
from stargazer.core.event.bus import EventBus, EventPayload
from stargazer.core.logging.logger import get_logger, setup_logging, shutdown_logging
from stargazer.core.storage import build_slot_store
from stargazer.core.storage.base import SlotStore
from stargazer.modules.catalog.loader import load_catalog
from stargazer.modules.energy.scheduler import EnergyRefillScheduler
from stargazer.modules.exploration.service import ProgressionEngine
from stargazer.modules.missions.service import MissionTracker, load_missions
from stargazer.modules.persistence.service import PersistenceGateway
from stargazer.modules.shared.exceptions import CatalogExhaustedError, ExplorationRejectedError

logger = get_logger(__name__)


@dataclass
class Session:
    store: SlotStore
    engine: ProgressionEngine
    tracker: MissionTracker
    scheduler: EnergyRefillScheduler


# ============================================================================
# Application Bootstrap
# ============================================================================


async def _startup() -> Session:
    """Initialize infrastructure and build the engine."""
    logger.info("========== STARGAZER INITIALIZATION START ==========")
    logger.info("Configuration", extra=Config.get_config_summary())

    config_manager = ConfigManager(config_dir=Config.CONFIG_DIR)
    config_manager.initialize()
    settings = ProgressionSettings.from_config(config_manager)
    logger.info("✓ Settings validated", extra={"max_energy": settings.max_energy})

    store = build_slot_store()
    await store.initialize()
    logger.info("✓ Slot store initialized", extra={"backend": Config.STORAGE_BACKEND.value})

    catalog = load_catalog()
    logger.info("✓ Catalog loaded", extra={"entries": len(catalog)})

    event_bus = EventBus()
    event_bus.subscribe("player.leveled_up", _announce_level_up)

    engine = ProgressionEngine(
        catalog,
        PersistenceGateway(store, settings, slot=Config.SAVE_SLOT),
        settings,
        event_bus=event_bus,
    )
    restored = await engine.load_progress()
    logger.info("✓ Progress ready", extra={"restored": restored, "level": engine.progress.level})

    tracker = MissionTracker(engine, load_missions())
    tracker.attach()

    scheduler = EnergyRefillScheduler(engine, poll_seconds=settings.refill_poll_seconds)
    scheduler.start()

    logger.info("========== INITIALIZATION COMPLETE ==========")
    return Session(store=store, engine=engine, tracker=tracker, scheduler=scheduler)


def _announce_level_up(payload: EventPayload) -> None:
    logger.info(
        "Level up",
        extra={"old_level": payload.get("old_level"), "new_level": payload.get("new_level")},
    )


# ============================================================================
# Play Loop
# ============================================================================


async def _play(engine: ProgressionEngine) -> int:
    """Explore while energy lasts. Returns the number of discoveries."""
    discoveries = 0
    while True:
        try:
            result = await engine.explore()
        except ExplorationRejectedError as exc:
            wait = engine.time_until_next_energy()
            logger.info(
                "Out of energy for now",
                extra={
                    "reason": exc.reason,
                    "next_energy_in_seconds": wait.total_seconds() if wait else None,
                },
            )
            return discoveries
        except CatalogExhaustedError:
            logger.info("Every object in the catalog has been discovered")
            return discoveries

        discoveries += 1
        logger.info(
            f"Discovered {result.record.entry.name}",
            extra={
                "rarity": result.record.rarity.value,
                "xp_gained": result.xp_gained,
                "level": result.level,
                "energy": result.progress.energy,
            },
        )


# ============================================================================
# Application Shutdown
# ============================================================================


async def _shutdown(session: Optional[Session]) -> None:
    logger.info("========== STARGAZER SHUTDOWN START ==========")
    if session is None:
        return

    try:
        await session.scheduler.stop()
        logger.info("✓ Refill scheduler stopped")
    except Exception as exc:
        logger.error(f"Scheduler shutdown error: {exc}", exc_info=True)

    session.tracker.detach()

    try:
        await session.engine.save_progress()
        await session.store.shutdown()
        logger.info("✓ Slot store shut down")
    except Exception as exc:
        logger.error(f"Slot store shutdown error: {exc}", exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================


async def main() -> None:
    setup_logging()
    session: Optional[Session] = None
    try:
        session = await _startup()
        discoveries = await _play(session.engine)

        completion = session.engine.collection_completion()
        logger.info(
            "Session summary",
            extra={
                "discoveries": discoveries,
                "level": session.engine.progress.level,
                "collection_completion": round(completion.overall, 3),
                "missions": session.tracker.summary(),
            },
        )
    except asyncio.CancelledError:
        logger.warning("Asyncio task cancellation received; shutting down gracefully.")
        raise
    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        sys.exit(1)
    finally:
        await _shutdown(session)
        shutdown_logging()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped via keyboard interrupt.")


if __name__ == "__main__":
    run()
