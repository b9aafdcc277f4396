"""
Progression Engine

Purpose
-------
Orchestrates the exploration loop: guards, rarity-weighted discovery,
energy, experience and persistence. The only writer of ``ProgressionState``.

Responsibilities
----------------
- ``explore()``: guarded, delayed, single-flight discovery
- ``refill_energy()`` / ``regenerate()``: whole-interval energy catch-up
- ``load_progress()`` / ``save_progress()`` / ``reset_game()``
- Collection queries (by type, by rarity, completion, next-energy countdown)
- Publishing domain events after each state change

Non-Responsibilities
--------------------
- Choosing the random draw (``SamplingPolicy``)
- Measuring accrual (``RegenerationPolicy``)
- Snapshot encoding and storage (``PersistenceGateway``)
- Scheduling refill ticks (``EnergyRefillScheduler``)

Concurrency
-----------
One asyncio loop, no locks. ``is_exploring`` is set before the first await
of an exploration and released on every exit path, including cancellation.
All mutation of one exploration happens in a single synchronous call, so a
refill tick can run during the delay but never observe a half-applied
discovery.

Usage Example
-------------
>>> engine = ProgressionEngine(catalog, gateway, settings)
>>> await engine.load_progress()
>>> try:
...     result = await engine.explore()
... except ExplorationRejectedError as exc:
...     print(exc.reason)
"""

from __future__ import annotations

import asyncio
import random
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Iterator, List, NoReturn, Optional

from stargazer.core.clock import Clock, SystemClock
from stargazer.core.config.manager import ProgressionSettings
from stargazer.core.event.bus import EventBus
from stargazer.core.logging.logger import LogContext, get_logger
from stargazer.domain.models.catalog import Catalog, DiscoveryRecord, ObjectType, Rarity
from stargazer.domain.models.progress import ProgressView
from stargazer.domain.models.state import ProgressionState
from stargazer.modules.energy.regeneration import RegenerationPolicy
from stargazer.modules.exploration.sampling import SamplingPolicy
from stargazer.modules.persistence.service import PersistenceGateway
from stargazer.modules.shared.base_service import BaseService
from stargazer.modules.shared.exceptions import (
    CatalogExhaustedError,
    ExplorationInProgressError,
    ExplorationRejectedError,
    InsufficientEnergyError,
)
from stargazer.modules.shared.formulas import completion_ratio

logger = get_logger(__name__)

ENERGY_PER_EXPLORATION = 1


@dataclass(frozen=True)
class ExplorationResult:
    """
    Outcome of a successful exploration.

    Attributes
    ----------
    record : DiscoveryRecord
        The newly discovered record (``discovered`` is always True)
    xp_gained : int
        Experience awarded
    leveled_up : bool
        Whether the reward crossed the level threshold
    level : int
        Level after the reward
    progress : ProgressView
        Counters after the exploration
    saved : bool
        Whether the snapshot reached storage
    """

    record: DiscoveryRecord
    xp_gained: int
    leveled_up: bool
    level: int
    progress: ProgressView
    saved: bool


@dataclass(frozen=True)
class CollectionCompletion:
    """Discovered fraction of the catalog, overall and per object type."""

    overall: float
    by_type: Dict[ObjectType, float]


class ProgressionEngine(BaseService):
    """
    Args:
        catalog: Current catalog
        gateway: Persistence gateway bound to an initialized store
        settings: Balance settings (defaults when omitted)
        clock: Time source (``SystemClock`` by default)
        rng: Random source for sampling (``secrets.SystemRandom`` by default)
        event_bus: Bus for domain events (a private one by default)
        sleep: Awaitable delay function, replaceable in tests
    """

    def __init__(
        self,
        catalog: Catalog,
        gateway: PersistenceGateway,
        settings: Optional[ProgressionSettings] = None,
        *,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(settings or ProgressionSettings(), event_bus or EventBus(), logger)
        self.catalog = catalog
        self._gateway = gateway
        self._clock: Clock = clock or SystemClock()
        self._sleep = sleep
        self._sampling = SamplingPolicy(self.settings.rarity_weights, rng=rng)
        self._regeneration = RegenerationPolicy.from_settings(self.settings)
        self._state = self._fresh_state()

    def _fresh_state(self) -> ProgressionState:
        return ProgressionState.fresh(
            self.catalog,
            max_energy=self.settings.max_energy,
            xp_per_level=self.settings.xp_per_level,
            now=self._clock.now(),
        )

    def _replace_state(self, state: ProgressionState) -> None:
        # An exploration in flight keeps its guard across a reset or load.
        state.is_exploring = self._state.is_exploring
        self._state = state

    # ========================================================================
    # EXPLORATION
    # ========================================================================

    @contextmanager
    def _exploration_guard(self) -> Iterator[None]:
        self._state.is_exploring = True
        try:
            yield
        finally:
            self._state.is_exploring = False

    async def explore(self) -> ExplorationResult:
        """
        Discover one undiscovered catalog entry.

        Raises
        ------
        InsufficientEnergyError
            No energy left; nothing changes.
        ExplorationInProgressError
            Another exploration is in flight; nothing changes.
        CatalogExhaustedError
            Everything is discovered; nothing changes besides the delay.
        """
        async with LogContext(operation="explore", component="exploration"):
            progress = self._state.progress
            if progress.energy < ENERGY_PER_EXPLORATION:
                await self._reject(InsufficientEnergyError(current=progress.energy))
            if self._state.is_exploring:
                await self._reject(ExplorationInProgressError())

            with self._exploration_guard():
                await self._sleep(self.settings.explore_delay_seconds)

                candidates = self._state.undiscovered()
                if not candidates:
                    exhausted = CatalogExhaustedError(catalog_size=len(self.catalog))
                    self.log_error("explore", exhausted, **exhausted.details)
                    await self.emit_event("exploration.exhausted", {"catalog_size": len(self.catalog)})
                    raise exhausted

                # A load during the delay may have replaced the state.
                if self._state.progress.energy < ENERGY_PER_EXPLORATION:
                    await self._reject(InsufficientEnergyError(current=self._state.progress.energy))

                selected = self._sampling.select(candidates)
                now = self._clock.now()
                record, leveled_up = self._state.apply_discovery(
                    selected.id, now, self.settings.xp_per_level
                )
                domain_events = self._state.progress.clear_domain_events()
                view = self._state.progress.view()

                saved = await self._gateway.save(self._state)

            self.log.info(
                "Exploration discovered object",
                extra={
                    "object_id": record.id,
                    "object_type": record.type.value,
                    "rarity": record.rarity.value,
                    "xp_gained": record.entry.xp,
                    "level": view.level,
                    "leveled_up": leveled_up,
                    "energy": view.energy,
                    "saved": saved,
                },
            )

            await self.emit_event(
                "exploration.discovered",
                {
                    "object_id": record.id,
                    "name": record.entry.name,
                    "type": record.type.value,
                    "rarity": record.rarity.value,
                    "xp": record.entry.xp,
                    "discovered_at": now.isoformat(),
                    "total_discovered": view.total_discovered,
                    "level": view.level,
                },
            )
            await self.emit_domain_events(domain_events)

            return ExplorationResult(
                record=record,
                xp_gained=record.entry.xp,
                leveled_up=leveled_up,
                level=view.level,
                progress=view,
                saved=saved,
            )

    async def _reject(self, error: ExplorationRejectedError) -> NoReturn:
        self.log_error("explore", error, **error.details)
        await self.emit_event("exploration.rejected", {"reason": error.reason, **error.details})
        raise error

    def can_explore(self) -> bool:
        return self._state.progress.energy >= ENERGY_PER_EXPLORATION and not self._state.is_exploring

    # ========================================================================
    # ENERGY
    # ========================================================================

    def refill_energy(self) -> int:
        """
        Credit every whole regeneration interval elapsed since the last refill.

        Synchronous and idempotent: calling it twice at the same instant
        credits nothing the second time. Does not persist.

        Returns
        -------
        int
            Energy actually added (0 when nothing accrued or already full).
        """
        progress = self._state.progress
        accrual = self._regeneration.accrue(progress.last_energy_refill, self._clock.now())
        if accrual.units == 0:
            return 0

        refilled = self._regeneration.apply(progress.energy, progress.max_energy, accrual)
        credited = progress.credit_energy(max(refilled - progress.energy, 0), accrual.new_reference)
        self.log.debug(
            "Energy regenerated",
            extra={
                "units": accrual.units,
                "credited": credited,
                "energy": progress.energy,
                "reference": accrual.new_reference.isoformat(),
            },
        )
        return credited

    async def regenerate(self) -> int:
        """``refill_energy()`` plus an ``energy.refilled`` event when energy was added."""
        credited = self.refill_energy()
        if credited:
            await self._publish_refill(credited)
        return credited

    async def _publish_refill(self, credited: int) -> None:
        await self.emit_event(
            "energy.refilled",
            {"credited": credited, "energy": self._state.progress.energy},
        )

    def time_until_next_energy(self) -> Optional[timedelta]:
        progress = self._state.progress
        return self._regeneration.time_until_next(
            progress.energy, progress.max_energy, progress.last_energy_refill, self._clock.now()
        )

    # ========================================================================
    # PERSISTENCE
    # ========================================================================

    async def load_progress(self) -> bool:
        """
        Restore the saved snapshot, reconciled against the current catalog.

        Returns False (and keeps the current state) when there is nothing
        usable to restore. Energy is caught up after restoring.
        """
        async with LogContext(operation="load_progress", component="persistence"):
            state = await self._gateway.load(self.catalog)
            if state is None:
                return False

            self._replace_state(state)
            credited = await self.regenerate()
            self.log_operation(
                "load_progress",
                level=state.progress.level,
                total_discovered=state.progress.total_discovered,
                energy=state.progress.energy,
                energy_credited=credited,
            )
            return True

    async def save_progress(self) -> bool:
        return await self._gateway.save(self._state)

    async def reset_game(self) -> None:
        """Return to default progress and delete the saved snapshot."""
        async with LogContext(operation="reset_game", component="persistence"):
            self._replace_state(self._fresh_state())
            deleted = await self._gateway.reset()
            self.log_operation("reset_game", snapshot_deleted=deleted)
            await self.emit_event("progress.reset", {"snapshot_deleted": deleted})

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def state(self) -> ProgressionState:
        return self._state

    @property
    def progress(self) -> ProgressView:
        return self._state.progress.view()

    @property
    def is_exploring(self) -> bool:
        return self._state.is_exploring

    @property
    def last_explore_time(self) -> Optional[datetime]:
        return self._state.last_explore_time

    @property
    def discovered(self) -> List[DiscoveryRecord]:
        """Discovered records, oldest first."""
        return self._state.discovered

    @property
    def records(self) -> List[DiscoveryRecord]:
        """Every record in catalog order."""
        return self._state.records

    def discovered_by_type(self, object_type: ObjectType) -> List[DiscoveryRecord]:
        return [r for r in self._state.discovered if r.type is object_type]

    def discovered_by_rarity(self, rarity: Rarity) -> List[DiscoveryRecord]:
        return [r for r in self._state.discovered if r.rarity is rarity]

    def rarity_count(self, rarity: Rarity) -> int:
        return self._state.count_by_rarity()[rarity]

    def rarity_breakdown(self) -> Dict[Rarity, int]:
        return self._state.count_by_rarity()

    def collection_completion(self) -> CollectionCompletion:
        totals = self.catalog.count_by_type()
        found = self._state.progress.discovered_by_type
        return CollectionCompletion(
            overall=completion_ratio(self._state.progress.total_discovered, len(self.catalog)),
            by_type={t: completion_ratio(found[t], totals[t]) for t in ObjectType},
        )
