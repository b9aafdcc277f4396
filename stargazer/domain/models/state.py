"""
Progression State for Stargazer.

Purpose
-------
The single aggregate the engine mutates: the player's counters plus one
discovery record per catalog entry.

Records are stored in an id-keyed dict in catalog order, and discovery
order is kept as a separate list of ids. Lookups are O(1) and the
"recently discovered" view needs no sorting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import Catalog, DiscoveryRecord, ObjectType, Rarity
from stargazer.domain.models.progress import UserProgress, empty_type_counts


class ProgressionState:
    """
    Mutable progression state.

    Attributes
    ----------
    progress : UserProgress
        Player counters
    is_exploring : bool
        Transient single-flight flag; never persisted
    last_explore_time : Optional[datetime]
        When the last successful exploration completed
    """

    def __init__(
        self,
        progress: UserProgress,
        records: Iterable[DiscoveryRecord],
        discovered_ids: Optional[Iterable[str]] = None,
        last_explore_time: Optional[datetime] = None,
    ) -> None:
        self.progress = progress
        self._records: Dict[str, DiscoveryRecord] = {}
        for record in records:
            if record.id in self._records:
                raise DomainValidationError(f"Duplicate record id: {record.id}", field="id")
            self._records[record.id] = record

        if discovered_ids is None:
            discovered_ids = [r.id for r in self._records.values() if r.discovered]
        self._discovered_ids: List[str] = list(discovered_ids)
        for entry_id in self._discovered_ids:
            record = self._records.get(entry_id)
            if record is None or not record.discovered:
                raise DomainValidationError(
                    f"Discovery order lists {entry_id} which is not a discovered record",
                    field="discovered_ids",
                )

        self.is_exploring = False
        self.last_explore_time = last_explore_time

    @classmethod
    def fresh(
        cls,
        catalog: Catalog,
        max_energy: int,
        xp_per_level: int,
        now: datetime,
    ) -> "ProgressionState":
        """Default state: nothing discovered, full energy, level 1."""
        return cls(
            progress=UserProgress.initial(max_energy, xp_per_level, now),
            records=[DiscoveryRecord(entry=entry) for entry in catalog],
        )

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get(self, entry_id: str) -> Optional[DiscoveryRecord]:
        return self._records.get(entry_id)

    @property
    def records(self) -> List[DiscoveryRecord]:
        """All records in catalog order."""
        return list(self._records.values())

    @property
    def discovered(self) -> List[DiscoveryRecord]:
        """Discovered records in the order they were found."""
        return [self._records[entry_id] for entry_id in self._discovered_ids]

    def undiscovered(self) -> List[DiscoveryRecord]:
        """Undiscovered records in catalog order."""
        return [r for r in self._records.values() if not r.discovered]

    def count_discovered(self) -> Tuple[int, Dict[ObjectType, int]]:
        """Recount discoveries from the records themselves."""
        by_type = empty_type_counts()
        total = 0
        for record in self._records.values():
            if record.discovered:
                total += 1
                by_type[record.type] += 1
        return total, by_type

    def count_by_rarity(self) -> Dict[Rarity, int]:
        counts = {rarity: 0 for rarity in Rarity}
        for entry_id in self._discovered_ids:
            counts[self._records[entry_id].rarity] += 1
        return counts

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def apply_discovery(
        self, entry_id: str, at: datetime, xp_per_level: int
    ) -> Tuple[DiscoveryRecord, bool]:
        """
        Apply one successful exploration.

        All preconditions are checked before anything changes, so a failure
        leaves the state untouched.

        Returns
        -------
        Tuple[DiscoveryRecord, bool]
            The newly discovered record and whether the player leveled up.

        Raises
        ------
        DomainValidationError
            Unknown id, already discovered, or no energy.
        """
        record = self._records.get(entry_id)
        if record is None:
            raise DomainValidationError(f"Unknown catalog id: {entry_id}", field="id")
        discovered = record.discover(at)
        if self.progress.energy < 1:
            raise DomainValidationError("Cannot explore without energy", field="energy")

        self._records[entry_id] = discovered
        self._discovered_ids.append(entry_id)
        self.progress.spend_energy(1)
        self.progress.record_discovery(discovered.type)
        leveled_up = self.progress.add_experience(discovered.entry.xp, xp_per_level)
        self.last_explore_time = at
        return discovered, leveled_up

    def is_consistent(self) -> bool:
        """True when the stored counters match the records."""
        total, by_type = self.count_discovered()
        return (
            total == self.progress.total_discovered
            and by_type == self.progress.discovered_by_type
            and total == len(self._discovered_ids)
        )
