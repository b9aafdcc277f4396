"""
Energy regeneration policy.

Energy accrues in whole intervals measured from a reference instant
(``last_energy_refill``). Crediting a unit moves the reference forward by
exactly the credited intervals, never to "now", so the partial interval in
progress is kept and polling frequency cannot change the outcome.

    reference = T, now = T + 17m, interval = 5m
    -> 3 units, new reference T + 15m (2 minutes still banked)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from stargazer.core.clock import ensure_utc
from stargazer.modules.shared.formulas import whole_intervals


@dataclass(frozen=True)
class Accrual:
    """
    Result of measuring regeneration between two instants.

    Attributes:
        units: Whole intervals elapsed (0 when the clock went backwards)
        new_reference: Reference advanced by ``units * interval``
    """

    units: int
    new_reference: datetime


class RegenerationPolicy:
    """
    Whole-interval energy accrual.

    Args:
        interval: Time for one regeneration unit (default 5 minutes)
        amount: Energy granted per unit (default 1)
    """

    def __init__(self, interval: timedelta = timedelta(minutes=5), amount: int = 1) -> None:
        if interval <= timedelta(0):
            raise ValueError(f"Regeneration interval must be positive, got {interval}")
        if amount < 1:
            raise ValueError(f"Regeneration amount must be >= 1, got {amount}")
        self.interval = interval
        self.amount = amount

    @classmethod
    def from_settings(cls, settings) -> "RegenerationPolicy":
        return cls(
            interval=timedelta(seconds=settings.energy_refill_seconds),
            amount=settings.energy_refill_amount,
        )

    def accrue(self, last_refill: datetime, now: datetime) -> Accrual:
        last_refill = ensure_utc(last_refill)
        units = whole_intervals(ensure_utc(now) - last_refill, self.interval)
        return Accrual(units=units, new_reference=last_refill + units * self.interval)

    def apply(self, energy: int, max_energy: int, accrual: Accrual) -> int:
        """Energy after crediting ``accrual``, capped at ``max_energy``."""
        return min(energy + accrual.units * self.amount, max_energy)

    def time_until_next(
        self, energy: int, max_energy: int, last_refill: datetime, now: datetime
    ) -> Optional[timedelta]:
        """
        Time left until the next unit lands, or None when energy is full.

        Measured from the current reference, so a pending (not yet applied)
        accrual shows as ``timedelta(0)``.
        """
        if energy >= max_energy:
            return None
        elapsed = ensure_utc(now) - ensure_utc(last_refill)
        if elapsed < timedelta(0):
            return self.interval
        if elapsed >= self.interval:
            return timedelta(0)
        return self.interval - elapsed
