"""
Stargazer Game Formulas

Purpose
-------
Pure calculation functions for the progression mechanics: the leveling
curve, whole-interval energy accrual and collection ratios.

Design Notes
------------
All formulas:
- Accept parameters explicitly (no config access)
- Return calculated values
- Have no side effects

Usage
-----
    from stargazer.modules.shared.formulas import xp_to_next_level

    threshold = xp_to_next_level(level=3, xp_per_level=100)  # 300
"""

from __future__ import annotations

from datetime import timedelta
from typing import Tuple


def xp_to_next_level(level: int, xp_per_level: int) -> int:
    """
    Experience needed to go from ``level`` to ``level + 1``.

    Linear curve: ``xp_per_level * level``.

    Example:
        >>> xp_to_next_level(1, 100)
        100
        >>> xp_to_next_level(4, 100)
        400
    """
    return xp_per_level * level


def apply_level_up(level: int, xp: int, xp_per_level: int) -> Tuple[int, int, int]:
    """
    Apply at most one level-up.

    Args:
        level: Current level
        xp: Experience after the reward was added
        xp_per_level: Curve constant

    Returns:
        ``(level, xp, xp_to_next_level)`` after the check. When ``xp`` still
        exceeds the new threshold it is carried over as-is; the next reward
        triggers the following level-up.

    Example:
        >>> apply_level_up(1, 130, 100)
        (2, 30, 200)
        >>> apply_level_up(1, 99, 100)
        (1, 99, 100)
    """
    threshold = xp_to_next_level(level, xp_per_level)
    if xp >= threshold:
        level += 1
        xp -= threshold
        threshold = xp_to_next_level(level, xp_per_level)
    return level, xp, threshold


def whole_intervals(elapsed: timedelta, interval: timedelta) -> int:
    """
    Number of complete intervals contained in ``elapsed``.

    Negative elapsed time (clock moved backwards) counts as zero.

    Example:
        >>> whole_intervals(timedelta(minutes=17), timedelta(minutes=5))
        3
    """
    if elapsed <= timedelta(0):
        return 0
    return elapsed // interval


def completion_ratio(discovered: int, total: int) -> float:
    """
    Fraction of ``total`` that has been discovered, in ``[0.0, 1.0]``.

    An empty pool reports ``0.0``.
    """
    if total <= 0:
        return 0.0
    return min(discovered / total, 1.0)


def capped_percentage(current: int, target: int) -> float:
    """
    Progress percentage capped at 100.

    Example:
        >>> capped_percentage(3, 10)
        30.0
        >>> capped_percentage(12, 10)
        100.0
    """
    if target <= 0:
        return 100.0
    return min(current / target * 100.0, 100.0)
