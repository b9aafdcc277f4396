"""
Unit Tests for Game Formulas

Pure functions only; no fixtures needed.
"""

from datetime import timedelta

import pytest

from stargazer.modules.shared.formulas import (
    apply_level_up,
    capped_percentage,
    completion_ratio,
    whole_intervals,
    xp_to_next_level,
)


@pytest.mark.unit
class TestLeveling:
    @pytest.mark.parametrize("level, expected", [(1, 100), (2, 200), (7, 700)])
    def test_threshold_is_linear_in_level(self, level, expected):
        assert xp_to_next_level(level, 100) == expected

    def test_level_up_carries_remainder(self):
        assert apply_level_up(1, 130, 100) == (2, 30, 200)

    def test_below_threshold_unchanged(self):
        assert apply_level_up(3, 299, 100) == (3, 299, 300)

    def test_applies_at_most_one_level(self):
        assert apply_level_up(1, 1000, 100) == (2, 900, 200)


@pytest.mark.unit
class TestIntervals:
    def test_counts_whole_intervals_only(self):
        assert whole_intervals(timedelta(minutes=17), timedelta(minutes=5)) == 3

    def test_partial_interval_counts_zero(self):
        assert whole_intervals(timedelta(minutes=4, seconds=59), timedelta(minutes=5)) == 0

    def test_negative_elapsed_counts_zero(self):
        assert whole_intervals(timedelta(minutes=-30), timedelta(minutes=5)) == 0


@pytest.mark.unit
class TestRatios:
    def test_completion_ratio(self):
        assert completion_ratio(3, 12) == pytest.approx(0.25)

    def test_empty_pool_is_zero(self):
        assert completion_ratio(0, 0) == 0.0

    def test_percentage_is_capped(self):
        assert capped_percentage(3, 10) == pytest.approx(30.0)
        assert capped_percentage(12, 10) == 100.0
