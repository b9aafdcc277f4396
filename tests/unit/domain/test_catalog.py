"""
Unit Tests for Catalog Domain Model

Test Coverage
-------------
- Rarity tier ordering
- CatalogEntry validation and dict conversion
- One-way discovery on DiscoveryRecord
- Catalog ordering and duplicate detection
"""

from datetime import datetime, timezone

import pytest

from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import (
    Catalog,
    CatalogEntry,
    DiscoveryRecord,
    ObjectType,
    Rarity,
)
from tests.conftest import make_entry

WHEN = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# RARITY TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestRarity:
    def test_tiers_are_ordered_by_rank(self):
        assert Rarity.COMMON < Rarity.RARE < Rarity.EPIC < Rarity.LEGENDARY
        assert Rarity.LEGENDARY >= Rarity.EPIC
        assert Rarity.RARE <= Rarity.RARE

    def test_ordering_ignores_string_order(self):
        """"Epic" sorts before "Rare" alphabetically but ranks above it."""
        assert Rarity.EPIC > Rarity.RARE
        assert sorted([Rarity.LEGENDARY, Rarity.COMMON, Rarity.EPIC, Rarity.RARE]) == list(Rarity)

    def test_enum_values_match_wire_format(self):
        assert ObjectType("BlackHole") is ObjectType.BLACK_HOLE
        assert Rarity("Legendary") is Rarity.LEGENDARY


# ============================================================================
# CATALOG ENTRY TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCatalogEntry:
    def test_from_dict_parses_enums_and_optional_fields(self):
        # Arrange
        data = {
            "id": "sirius",
            "name": "Sirius",
            "type": "Star",
            "rarity": "Rare",
            "xp": 25,
            "loot": ["Stardust"],
            "stats": {"distance": "8.6 ly", "mass": None},
        }

        # Act
        entry = CatalogEntry.from_dict(data)

        # Assert
        assert entry.type is ObjectType.STAR
        assert entry.rarity is Rarity.RARE
        assert entry.loot == ("Stardust",)
        assert entry.stats == {"distance": "8.6 ly"}

    def test_to_dict_round_trips(self):
        entry = make_entry("mars", ObjectType.PLANET, Rarity.COMMON, lore="Red planet")

        assert CatalogEntry.from_dict(entry.to_dict()) == entry

    @pytest.mark.parametrize(
        "override, message",
        [
            ({"type": "Comet"}, "Comet"),
            ({"rarity": "Mythic"}, "Mythic"),
            ({"xp": 0}, "xp must be positive"),
            ({"xp": "ten"}, "xp must be an integer"),
            ({"name": ""}, "name cannot be empty"),
        ],
    )
    def test_from_dict_rejects_invalid_fields(self, override, message):
        data = {"id": "x", "name": "X", "type": "Star", "rarity": "Common", "xp": 5, **override}

        with pytest.raises(DomainValidationError) as exc_info:
            CatalogEntry.from_dict(data)

        assert message in str(exc_info.value)

    def test_from_dict_reports_missing_field(self):
        with pytest.raises(DomainValidationError) as exc_info:
            CatalogEntry.from_dict({"id": "x", "name": "X", "type": "Star", "rarity": "Common"})

        assert exc_info.value.field == "xp"


# ============================================================================
# DISCOVERY RECORD TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestDiscoveryRecord:
    def test_new_record_is_undiscovered(self):
        record = DiscoveryRecord(entry=make_entry("sun"))

        assert record.discovered is False
        assert record.discovered_at is None

    def test_discover_returns_new_record(self):
        record = DiscoveryRecord(entry=make_entry("sun"))

        found = record.discover(WHEN)

        assert found.discovered is True
        assert found.discovered_at == WHEN
        assert record.discovered is False

    def test_discovery_is_one_way(self):
        found = DiscoveryRecord(entry=make_entry("sun")).discover(WHEN)

        with pytest.raises(DomainValidationError):
            found.discover(WHEN)


# ============================================================================
# CATALOG TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestCatalog:
    def test_preserves_insertion_order(self, small_catalog):
        assert small_catalog.ids() == ["sun", "sirius", "mars", "andromeda", "orion-nebula", "ton-618"]

    def test_rejects_duplicate_ids(self):
        with pytest.raises(DomainValidationError) as exc_info:
            Catalog([make_entry("sun"), make_entry("sun", ObjectType.PLANET)])

        assert "sun" in str(exc_info.value)

    def test_count_by_type_covers_every_type(self, small_catalog):
        counts = small_catalog.count_by_type()

        assert set(counts) == set(ObjectType)
        assert counts[ObjectType.STAR] == 2
        assert counts[ObjectType.EXOPLANET] == 0

    def test_lookup(self, small_catalog):
        assert "mars" in small_catalog
        assert small_catalog.get("pluto") is None
        assert len(small_catalog) == 6
