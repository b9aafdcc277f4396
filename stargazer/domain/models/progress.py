"""
User Progress Domain Model for Stargazer.

Purpose
-------
Rich domain model for the player's counters: level, experience, energy and
discovery totals. State transitions live here so the engine only
orchestrates.

Responsibilities
----------------
- Enforce energy bounds (0 <= energy <= max_energy)
- Apply experience gain and the single-step level-up rule
- Keep discovery counters consistent (sum of per-type counts == total)
- Emit ``player.experience_gained`` and ``player.leveled_up`` domain events

Non-Responsibilities
--------------------
- Deciding how much energy accrued (``RegenerationPolicy``)
- Persistence (``PersistenceGateway``)

Usage Example
-------------
>>> progress = UserProgress.initial(max_energy=10, xp_per_level=100, now=now)
>>> progress.spend_energy()
>>> leveled = progress.add_experience(130, xp_per_level=100)
>>> leveled, progress.level, progress.xp
(True, 2, 30)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional

from stargazer.domain.models.base import (
    AggregateRoot,
    DomainValidationError,
    validate_non_negative,
    validate_positive,
)
from stargazer.domain.models.catalog import ObjectType
from stargazer.modules.shared.formulas import apply_level_up, xp_to_next_level


def empty_type_counts() -> Dict[ObjectType, int]:
    return {object_type: 0 for object_type in ObjectType}


# ============================================================================
# READ-ONLY VIEW
# ============================================================================


@dataclass(frozen=True)
class ProgressView:
    """
    Immutable copy of ``UserProgress`` handed to callers.

    Attributes
    ----------
    level, xp, xp_to_next_level : int
        Leveling state
    energy, max_energy : int
        Current and maximum energy
    last_energy_refill : datetime
        Reference instant of the regeneration clock
    total_discovered : int
        Number of discovered objects
    discovered_by_type : Mapping[ObjectType, int]
        Per-type discovery counts over every ObjectType
    """

    level: int
    xp: int
    xp_to_next_level: int
    energy: int
    max_energy: int
    last_energy_refill: datetime
    total_discovered: int
    discovered_by_type: Mapping[ObjectType, int] = field(default_factory=empty_type_counts)


# ============================================================================
# USER PROGRESS AGGREGATE
# ============================================================================


class UserProgress(AggregateRoot):
    """
    Player counters with business rules.

    Business Rules
    --------------
    - Level starts at 1 and only grows
    - ``xp_to_next_level`` is ``xp_per_level * level``
    - Energy never exceeds ``max_energy`` and never goes negative
    - Each discovery increments the total and exactly one per-type counter

    Domain Events
    -------------
    - player.experience_gained: every experience reward
    - player.leveled_up: when a reward crosses the threshold
    """

    def __init__(
        self,
        level: int,
        xp: int,
        xp_to_next_level: int,
        energy: int,
        max_energy: int,
        last_energy_refill: datetime,
        total_discovered: int = 0,
        discovered_by_type: Optional[Mapping[ObjectType, int]] = None,
    ) -> None:
        super().__init__()
        validate_positive(level, "level")
        validate_non_negative(xp, "xp")
        validate_positive(xp_to_next_level, "xp_to_next_level")
        validate_positive(max_energy, "max_energy")
        validate_non_negative(energy, "energy")
        validate_non_negative(total_discovered, "total_discovered")
        if energy > max_energy:
            raise DomainValidationError(
                f"energy {energy} exceeds max_energy {max_energy}", field="energy"
            )

        self.level = level
        self.xp = xp
        self.xp_to_next_level = xp_to_next_level
        self.energy = energy
        self.max_energy = max_energy
        self.last_energy_refill = last_energy_refill
        self.total_discovered = total_discovered
        self.discovered_by_type: Dict[ObjectType, int] = empty_type_counts()
        for object_type, count in (discovered_by_type or {}).items():
            self.discovered_by_type[ObjectType(object_type)] = count

    @classmethod
    def initial(cls, max_energy: int, xp_per_level: int, now: datetime) -> "UserProgress":
        """Fresh player: level 1, no xp, full energy, regeneration clock at ``now``."""
        return cls(
            level=1,
            xp=0,
            xp_to_next_level=xp_to_next_level(1, xp_per_level),
            energy=max_energy,
            max_energy=max_energy,
            last_energy_refill=now,
        )

    # ========================================================================
    # BUSINESS LOGIC - ENERGY
    # ========================================================================

    @property
    def is_energy_full(self) -> bool:
        return self.energy >= self.max_energy

    def spend_energy(self, amount: int = 1) -> None:
        """
        Consume energy for an action.

        Raises
        ------
        DomainValidationError
            If the player has less than ``amount`` energy.
        """
        validate_positive(amount, "amount")
        if self.energy < amount:
            raise DomainValidationError(
                f"Insufficient energy: have {self.energy}, need {amount}",
                field="energy",
            )
        self.energy -= amount

    def credit_energy(self, amount: int, new_reference: datetime) -> int:
        """
        Add regenerated energy and move the regeneration clock.

        The reference moves even when energy is already full, so a full
        bar does not bank time.

        Returns
        -------
        int
            Energy actually added after capping at ``max_energy``.
        """
        validate_non_negative(amount, "amount")
        before = self.energy
        self.energy = min(self.energy + amount, self.max_energy)
        self.last_energy_refill = new_reference
        return self.energy - before

    # ========================================================================
    # BUSINESS LOGIC - EXPERIENCE & PROGRESSION
    # ========================================================================

    def add_experience(self, amount: int, xp_per_level: int) -> bool:
        """
        Add experience and apply at most one level-up.

        A reward large enough to cross two thresholds still levels once; the
        remaining experience carries over to the next reward.

        Returns
        -------
        bool
            True when the player leveled up.
        """
        validate_positive(amount, "amount")
        old_level = self.level

        self.add_domain_event(
            "player.experience_gained",
            {"amount": amount, "new_total": self.xp + amount},
        )

        self.level, self.xp, self.xp_to_next_level = apply_level_up(
            self.level, self.xp + amount, xp_per_level
        )

        if self.level > old_level:
            self.add_domain_event(
                "player.leveled_up",
                {"old_level": old_level, "new_level": self.level},
            )
            return True
        return False

    # ========================================================================
    # BUSINESS LOGIC - DISCOVERY COUNTERS
    # ========================================================================

    def record_discovery(self, object_type: ObjectType) -> None:
        self.total_discovered += 1
        self.discovered_by_type[object_type] += 1

    def replace_counts(self, total: int, by_type: Mapping[ObjectType, int]) -> None:
        """Overwrite the discovery counters with recounted values."""
        self.total_discovered = total
        self.discovered_by_type = empty_type_counts()
        self.discovered_by_type.update(by_type)

    def view(self) -> ProgressView:
        return ProgressView(
            level=self.level,
            xp=self.xp,
            xp_to_next_level=self.xp_to_next_level,
            energy=self.energy,
            max_energy=self.max_energy,
            last_energy_refill=self.last_energy_refill,
            total_discovered=self.total_discovered,
            discovered_by_type=dict(self.discovered_by_type),
        )

    def __repr__(self) -> str:
        return (
            f"UserProgress(level={self.level}, xp={self.xp}/{self.xp_to_next_level}, "
            f"energy={self.energy}/{self.max_energy}, discovered={self.total_discovered})"
        )
