"""
Unit Tests for UserProgress and ProgressionState

Test Coverage
-------------
- Experience gain and the single-step level-up rule
- Energy spending, crediting and bounds
- Domain event emission
- Atomic discovery application and counter consistency

Testing Strategy
----------------
- Pure domain objects, no storage or event bus
- AAA pattern (Arrange, Act, Assert)
"""

from datetime import datetime, timedelta, timezone

import pytest

from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import ObjectType, Rarity
from stargazer.domain.models.progress import UserProgress
from stargazer.domain.models.state import ProgressionState
from tests.conftest import assert_domain_event_emitted, get_domain_event_payload

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def progress():
    return UserProgress.initial(max_energy=10, xp_per_level=100, now=NOW)


@pytest.fixture
def state(small_catalog):
    return ProgressionState.fresh(small_catalog, max_energy=10, xp_per_level=100, now=NOW)


# ============================================================================
# INITIAL STATE
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestInitialProgress:
    def test_defaults(self, progress):
        assert progress.level == 1
        assert progress.xp == 0
        assert progress.xp_to_next_level == 100
        assert progress.energy == 10
        assert progress.max_energy == 10
        assert progress.last_energy_refill == NOW
        assert progress.total_discovered == 0
        assert set(progress.discovered_by_type.values()) == {0}

    def test_energy_above_max_is_rejected(self):
        with pytest.raises(DomainValidationError):
            UserProgress(
                level=1, xp=0, xp_to_next_level=100, energy=11, max_energy=10, last_energy_refill=NOW
            )


# ============================================================================
# EXPERIENCE & LEVELING
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestExperience:
    def test_crossing_threshold_levels_up_and_carries_remainder(self, progress):
        # Act
        leveled = progress.add_experience(130, xp_per_level=100)

        # Assert
        assert leveled is True
        assert (progress.level, progress.xp, progress.xp_to_next_level) == (2, 30, 200)

    def test_below_threshold_keeps_level(self, progress):
        leveled = progress.add_experience(99, xp_per_level=100)

        assert leveled is False
        assert (progress.level, progress.xp) == (1, 99)

    def test_exact_threshold_levels_up_with_zero_xp(self, progress):
        progress.add_experience(100, xp_per_level=100)

        assert (progress.level, progress.xp) == (2, 0)

    def test_huge_reward_levels_only_once(self, progress):
        """Crossing two thresholds in one reward applies a single level-up."""
        progress.add_experience(500, xp_per_level=100)

        assert progress.level == 2
        assert progress.xp == 400
        assert progress.xp_to_next_level == 200

    def test_carried_xp_levels_on_next_reward(self, progress):
        progress.add_experience(500, xp_per_level=100)

        progress.add_experience(1, xp_per_level=100)

        assert progress.level == 3
        assert progress.xp == 201

    def test_emits_domain_events(self, progress):
        progress.add_experience(130, xp_per_level=100)

        assert assert_domain_event_emitted(progress, "player.experience_gained")
        payload = get_domain_event_payload(progress, "player.leveled_up")
        assert payload == {"old_level": 1, "new_level": 2}

    def test_no_level_event_without_level_up(self, progress):
        progress.add_experience(10, xp_per_level=100)

        assert not assert_domain_event_emitted(progress, "player.leveled_up")


# ============================================================================
# ENERGY
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestEnergy:
    def test_spend_energy(self, progress):
        progress.spend_energy()

        assert progress.energy == 9
        assert not progress.is_energy_full

    def test_cannot_spend_below_zero(self, progress):
        progress.energy = 0

        with pytest.raises(DomainValidationError):
            progress.spend_energy()
        assert progress.energy == 0

    def test_credit_is_capped_at_max(self, progress):
        progress.energy = 8
        later = NOW + timedelta(minutes=30)

        credited = progress.credit_energy(6, later)

        assert credited == 2
        assert progress.energy == 10
        assert progress.last_energy_refill == later

    def test_credit_at_max_still_moves_reference(self, progress):
        later = NOW + timedelta(minutes=5)

        credited = progress.credit_energy(1, later)

        assert credited == 0
        assert progress.last_energy_refill == later


# ============================================================================
# PROGRESSION STATE
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProgressionState:
    def test_fresh_state_has_one_undiscovered_record_per_entry(self, state, small_catalog):
        assert [r.id for r in state.records] == small_catalog.ids()
        assert state.discovered == []
        assert len(state.undiscovered()) == len(small_catalog)
        assert state.is_exploring is False
        assert state.last_explore_time is None

    def test_apply_discovery_updates_everything_together(self, state):
        # Act
        record, leveled_up = state.apply_discovery("andromeda", NOW, xp_per_level=100)

        # Assert
        assert record.discovered_at == NOW
        assert leveled_up is False
        assert state.get("andromeda").discovered is True
        assert state.progress.energy == 9
        assert state.progress.xp == 50
        assert state.progress.total_discovered == 1
        assert state.progress.discovered_by_type[ObjectType.GALAXY] == 1
        assert state.last_explore_time == NOW
        assert state.is_consistent()

    def test_discovered_lists_records_in_discovery_order(self, state):
        for entry_id in ["mars", "sun", "ton-618"]:
            state.apply_discovery(entry_id, NOW, xp_per_level=100)

        assert [r.id for r in state.discovered] == ["mars", "sun", "ton-618"]
        assert [r.id for r in state.undiscovered()] == ["sirius", "andromeda", "orion-nebula"]

    def test_rediscovery_is_rejected_without_mutation(self, state):
        state.apply_discovery("sun", NOW, xp_per_level=100)
        before = state.progress.view()

        with pytest.raises(DomainValidationError):
            state.apply_discovery("sun", NOW, xp_per_level=100)

        assert state.progress.view() == before

    def test_no_energy_is_rejected_without_mutation(self, state):
        state.progress.energy = 0

        with pytest.raises(DomainValidationError):
            state.apply_discovery("sun", NOW, xp_per_level=100)

        assert state.get("sun").discovered is False
        assert state.progress.total_discovered == 0

    def test_unknown_id_is_rejected(self, state):
        with pytest.raises(DomainValidationError):
            state.apply_discovery("pluto", NOW, xp_per_level=100)

    def test_count_by_rarity(self, state):
        state.apply_discovery("sirius", NOW, xp_per_level=100)
        state.apply_discovery("orion-nebula", NOW, xp_per_level=100)

        counts = state.count_by_rarity()

        assert counts[Rarity.RARE] == 2
        assert counts[Rarity.LEGENDARY] == 0

    def test_inconsistent_counters_are_detected(self, state):
        state.apply_discovery("sun", NOW, xp_per_level=100)
        state.progress.total_discovered = 5

        assert state.is_consistent() is False
