"""
Unit Tests for Energy Regeneration Policy

Test Coverage
-------------
- Whole-interval accrual and reference advancement
- Backwards clocks and naive timestamps
- Countdown to the next unit
"""

from datetime import datetime, timedelta, timezone

import pytest

from stargazer.core.config.manager import ProgressionSettings
from stargazer.modules.energy.regeneration import Accrual, RegenerationPolicy

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def policy():
    return RegenerationPolicy(interval=timedelta(minutes=5), amount=1)


@pytest.mark.unit
class TestAccrue:
    def test_seventeen_minutes_accrue_three_units(self, policy):
        accrual = policy.accrue(T0, T0 + timedelta(minutes=17))

        assert accrual.units == 3
        assert accrual.new_reference == T0 + timedelta(minutes=15)

    def test_partial_interval_accrues_nothing(self, policy):
        accrual = policy.accrue(T0, T0 + timedelta(minutes=4))

        assert accrual == Accrual(units=0, new_reference=T0)

    def test_backwards_clock_accrues_nothing(self, policy):
        accrual = policy.accrue(T0, T0 - timedelta(hours=1))

        assert accrual.units == 0
        assert accrual.new_reference == T0

    def test_naive_timestamps_are_treated_as_utc(self, policy):
        naive = datetime(2025, 1, 1, 12, 0)

        accrual = policy.accrue(naive, T0 + timedelta(minutes=10))

        assert accrual.units == 2
        assert accrual.new_reference.tzinfo is not None

    def test_polling_rate_does_not_change_total(self, policy):
        """Crediting every minute lands the same units as one catch-up."""
        reference = T0
        total_units = 0
        for minute in range(1, 18):
            accrual = policy.accrue(reference, T0 + timedelta(minutes=minute))
            total_units += accrual.units
            reference = accrual.new_reference

        assert total_units == 3
        assert reference == T0 + timedelta(minutes=15)


@pytest.mark.unit
class TestApply:
    def test_apply_caps_at_max(self, policy):
        assert policy.apply(8, 10, Accrual(units=5, new_reference=T0)) == 10

    def test_amount_multiplies_units(self):
        policy = RegenerationPolicy(interval=timedelta(minutes=5), amount=2)

        assert policy.apply(1, 10, Accrual(units=3, new_reference=T0)) == 7


@pytest.mark.unit
class TestTimeUntilNext:
    def test_full_energy_has_no_countdown(self, policy):
        assert policy.time_until_next(10, 10, T0, T0) is None

    def test_counts_down_from_reference(self, policy):
        remaining = policy.time_until_next(3, 10, T0, T0 + timedelta(minutes=2))

        assert remaining == timedelta(minutes=3)

    def test_pending_accrual_reports_zero(self, policy):
        assert policy.time_until_next(3, 10, T0, T0 + timedelta(minutes=6)) == timedelta(0)

    def test_backwards_clock_reports_full_interval(self, policy):
        assert policy.time_until_next(3, 10, T0, T0 - timedelta(minutes=1)) == timedelta(minutes=5)


@pytest.mark.unit
class TestConstruction:
    def test_from_settings(self):
        policy = RegenerationPolicy.from_settings(
            ProgressionSettings(energy_refill_seconds=60, energy_refill_amount=2)
        )

        assert policy.interval == timedelta(minutes=1)
        assert policy.amount == 2

    @pytest.mark.parametrize("interval, amount", [(timedelta(0), 1), (timedelta(minutes=5), 0)])
    def test_rejects_invalid_parameters(self, interval, amount):
        with pytest.raises(ValueError):
            RegenerationPolicy(interval=interval, amount=amount)
