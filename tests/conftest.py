"""
Pytest Configuration and Shared Fixtures

Purpose
-------
Provide reusable test fixtures for unit and integration tests of the
progression engine.

Responsibilities
----------------
- Pin the environment to "testing" before application modules import
- Provide a controllable clock and a seeded random source
- Provide a small catalog covering several object types and rarities
- Provide initialized in-memory storage, a persistence gateway and an
  engine factory with the exploration delay switched off

Architecture Notes
------------------
- Unit tests never touch disk or network; storage is ``MemorySlotStore``
- Integration tests use ``tmp_path`` (file store, SQLite via aiosqlite)
- Async fixtures use ``pytest_asyncio.fixture`` (strict mode)
"""

import os
import random
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

# Static config is read on import, so the environment must be set first.
os.environ["STARGAZER_ENV"] = "testing"
os.environ["STARGAZER_STORAGE"] = "memory"
os.environ.setdefault("STARGAZER_LOG_LEVEL", "DEBUG")

from stargazer.core.config.manager import ProgressionSettings  # noqa: E402
from stargazer.core.event.bus import EventBus  # noqa: E402
from stargazer.core.storage.memory import MemorySlotStore  # noqa: E402
from stargazer.domain.models.catalog import (  # noqa: E402
    Catalog,
    CatalogEntry,
    ObjectType,
    Rarity,
)
from stargazer.modules.exploration.service import ProgressionEngine  # noqa: E402
from stargazer.modules.persistence.service import PersistenceGateway  # noqa: E402


START_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# TIME & RANDOMNESS
# ============================================================================


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    """
    Frozen UTC clock starting at 2025-01-01 12:00.

    Scope: function
    Uses: Regeneration and timestamp tests
    """
    return FrozenClock()


@pytest.fixture
def rng():
    """Seeded random source so sampling is reproducible."""
    return random.Random(1234)


# ============================================================================
# CATALOG & SETTINGS
# ============================================================================


def make_entry(entry_id, object_type=ObjectType.STAR, rarity=Rarity.COMMON, xp=10, **kwargs):
    return CatalogEntry(
        id=entry_id,
        name=kwargs.pop("name", entry_id.replace("-", " ").title()),
        type=object_type,
        rarity=rarity,
        xp=xp,
        **kwargs,
    )


@pytest.fixture
def small_catalog():
    """
    Six entries across four object types and all four rarities.

    Scope: function
    Uses: Engine, persistence and mission tests
    """
    return Catalog(
        [
            make_entry("sun", ObjectType.STAR, Rarity.COMMON, xp=10),
            make_entry("sirius", ObjectType.STAR, Rarity.RARE, xp=25),
            make_entry("mars", ObjectType.PLANET, Rarity.COMMON, xp=10),
            make_entry("andromeda", ObjectType.GALAXY, Rarity.EPIC, xp=50),
            make_entry("orion-nebula", ObjectType.NEBULA, Rarity.RARE, xp=30),
            make_entry("ton-618", ObjectType.BLACK_HOLE, Rarity.LEGENDARY, xp=100),
        ]
    )


@pytest.fixture
def settings():
    """Default balance with the exploration delay switched off."""
    return ProgressionSettings(explore_delay_seconds=0.0)


# ============================================================================
# INFRASTRUCTURE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def memory_store():
    """
    Initialized in-memory slot store.

    Scope: function
    Cleanup: shutdown after the test
    """
    store = MemorySlotStore()
    await store.initialize()
    yield store
    await store.shutdown()


@pytest.fixture
def gateway(memory_store, settings):
    return PersistenceGateway(memory_store, settings)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """
    Every event published on ``event_bus`` as ``(name, payload)`` pairs.

    Usage:
        await engine.explore()
        assert "exploration.discovered" in [name for name, _ in recorded_events]
    """
    events = []

    # Wildcard listeners do not see the event name, so wrap publish instead.
    original_publish = event_bus.publish

    async def publish(event_name, data):
        events.append((event_name, data))
        return await original_publish(event_name, data)

    event_bus.publish = publish
    return events


@pytest.fixture
def make_engine(small_catalog, gateway, settings, clock, rng, event_bus):
    """
    Factory for engines sharing the test's catalog, storage and clock.

    Usage:
        engine = make_engine()
        engine = make_engine(settings=ProgressionSettings(max_energy=2, explore_delay_seconds=0))
    """

    def factory(**overrides):
        kwargs = {
            "catalog": small_catalog,
            "gateway": gateway,
            "settings": settings,
            "clock": clock,
            "rng": rng,
            "event_bus": event_bus,
        }
        kwargs.update(overrides)
        return ProgressionEngine(
            kwargs.pop("catalog"),
            kwargs.pop("gateway"),
            kwargs.pop("settings"),
            **kwargs,
        )

    return factory


@pytest.fixture
def engine(make_engine):
    return make_engine()


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def assert_domain_event_emitted(domain_model, event_name: str) -> bool:
    """
    Assert that a domain model emitted a specific event.

    Usage:
        progress.add_experience(100, xp_per_level=100)
        assert assert_domain_event_emitted(progress, "player.leveled_up")
    """
    events = domain_model.get_pending_events()
    return any(event.event_name == event_name for event in events)


def get_domain_event_payload(domain_model, event_name: str) -> dict | None:
    """Get the payload of a specific pending domain event."""
    events = domain_model.get_pending_events()
    for event in events:
        if event.event_name == event_name:
            return event.payload
    return None
