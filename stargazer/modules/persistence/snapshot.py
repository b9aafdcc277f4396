"""
Snapshot codec and reconciliation.

Purpose
-------
Translate ``ProgressionState`` to and from the persisted JSON document, and
merge a decoded snapshot into the current catalog.

Wire format (single slot, camelCase keys, ISO-8601 UTC timestamps)::

    {
      "userProgress": {
        "level": 2, "xp": 30, "xpToNextLevel": 200,
        "energy": 7, "maxEnergy": 10,
        "lastEnergyRefill": "2025-01-01T12:15:00Z",
        "totalDiscovered": 3,
        "discoveredByType": {"Star": 1, "Planet": 2, ...}
      },
      "discoveredObjects": [
        {"id": "sirius", "name": "Sirius", ..., "discovered": true,
         "discoveredAt": "2025-01-01T12:03:00Z"}
      ],
      "lastExploreTime": "2025-01-01T12:03:00Z" | null
    }

``discoveredObjects`` lists discovered records only, in discovery order.

Design Notes
------------
- Decoding is strict: anything malformed raises ``CorruptSnapshotError``
- Reconciliation is lenient: it adapts a well-formed snapshot to the
  current catalog and settings and reports what it had to change
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from stargazer.core.clock import ensure_utc
from stargazer.core.config.manager import ProgressionSettings
from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import Catalog, CatalogEntry, DiscoveryRecord, ObjectType
from stargazer.domain.models.progress import UserProgress
from stargazer.domain.models.state import ProgressionState
from stargazer.modules.shared.exceptions import CorruptSnapshotError
from stargazer.modules.shared.formulas import xp_to_next_level


# ============================================================================
# TIMESTAMPS
# ============================================================================


def format_timestamp(value: datetime) -> str:
    text = ensure_utc(value).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_timestamp(value: Any, field_name: str) -> datetime:
    if not isinstance(value, str):
        raise CorruptSnapshotError(f"{field_name} must be an ISO-8601 string, got {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise CorruptSnapshotError(f"{field_name} is not ISO-8601: {value!r}") from exc
    return ensure_utc(parsed)


# ============================================================================
# ENCODE
# ============================================================================


def snapshot_to_dict(state: ProgressionState) -> Dict[str, Any]:
    progress = state.progress
    return {
        "userProgress": {
            "level": progress.level,
            "xp": progress.xp,
            "xpToNextLevel": progress.xp_to_next_level,
            "energy": progress.energy,
            "maxEnergy": progress.max_energy,
            "lastEnergyRefill": format_timestamp(progress.last_energy_refill),
            "totalDiscovered": progress.total_discovered,
            "discoveredByType": {t.value: c for t, c in progress.discovered_by_type.items()},
        },
        "discoveredObjects": [
            {
                **record.entry.to_dict(),
                "discovered": True,
                "discoveredAt": format_timestamp(record.discovered_at),
            }
            for record in state.discovered
        ],
        "lastExploreTime": (
            format_timestamp(state.last_explore_time) if state.last_explore_time else None
        ),
    }


def encode_snapshot(state: ProgressionState) -> str:
    return json.dumps(snapshot_to_dict(state), ensure_ascii=False, separators=(",", ":"))


# ============================================================================
# DECODE
# ============================================================================


@dataclass
class DecodedSnapshot:
    """Strictly validated snapshot content, not yet matched to a catalog."""

    level: int
    xp: int
    xp_to_next_level: int
    energy: int
    max_energy: int
    last_energy_refill: datetime
    total_discovered: int
    discovered_by_type: Dict[ObjectType, int]
    discovered: List[DiscoveryRecord]
    last_explore_time: Optional[datetime]


def _require_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise CorruptSnapshotError(f"{field_name} must be an object")
    return value


def _require_count(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise CorruptSnapshotError(f"userProgress.{key} must be a non-negative integer, got {value!r}")
    return value


def decode_snapshot(payload: str) -> DecodedSnapshot:
    """
    Parse and validate a snapshot document.

    Raises:
        CorruptSnapshotError: Invalid JSON, wrong shape, bad timestamps or
            unknown enum values.
    """
    try:
        document = json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise CorruptSnapshotError(f"invalid JSON: {exc}") from exc

    root = _require_mapping(document, "snapshot")
    progress = _require_mapping(root.get("userProgress"), "userProgress")

    by_type_raw = _require_mapping(progress.get("discoveredByType", {}), "userProgress.discoveredByType")
    by_type: Dict[ObjectType, int] = {t: 0 for t in ObjectType}
    for name, count in by_type_raw.items():
        try:
            object_type = ObjectType(name)
        except ValueError as exc:
            raise CorruptSnapshotError(f"unknown object type {name!r} in discoveredByType") from exc
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise CorruptSnapshotError(f"discoveredByType.{name} must be a non-negative integer")
        by_type[object_type] = count

    objects = root.get("discoveredObjects", [])
    if not isinstance(objects, list):
        raise CorruptSnapshotError("discoveredObjects must be a list")

    discovered: List[DiscoveryRecord] = []
    for index, item in enumerate(objects):
        item = _require_mapping(item, f"discoveredObjects[{index}]")
        if item.get("discovered") is not True:
            continue
        try:
            entry = CatalogEntry.from_dict(item)
        except DomainValidationError as exc:
            raise CorruptSnapshotError(f"discoveredObjects[{index}]: {exc}") from exc
        discovered_at = parse_timestamp(item.get("discoveredAt"), f"discoveredObjects[{index}].discoveredAt")
        discovered.append(DiscoveryRecord(entry=entry, discovered_at=discovered_at))

    last_explore_raw = root.get("lastExploreTime")
    last_explore_time = (
        parse_timestamp(last_explore_raw, "lastExploreTime") if last_explore_raw is not None else None
    )

    level = _require_count(progress, "level")
    if level < 1:
        raise CorruptSnapshotError("userProgress.level must be >= 1")

    return DecodedSnapshot(
        level=level,
        xp=_require_count(progress, "xp"),
        xp_to_next_level=_require_count(progress, "xpToNextLevel"),
        energy=_require_count(progress, "energy"),
        max_energy=_require_count(progress, "maxEnergy"),
        last_energy_refill=parse_timestamp(progress.get("lastEnergyRefill"), "userProgress.lastEnergyRefill"),
        total_discovered=_require_count(progress, "totalDiscovered"),
        discovered_by_type=by_type,
        discovered=discovered,
        last_explore_time=last_explore_time,
    )


# ============================================================================
# RECONCILE
# ============================================================================


@dataclass
class ReconcileReport:
    """What reconciliation had to change to fit the snapshot to the catalog."""

    orphaned_ids: List[str] = field(default_factory=list)
    duplicate_ids: List[str] = field(default_factory=list)
    undiscovered_entries: int = 0
    recounted: bool = False
    energy_clamped: bool = False
    threshold_recomputed: bool = False

    @property
    def changed(self) -> bool:
        return bool(
            self.orphaned_ids
            or self.duplicate_ids
            or self.recounted
            or self.energy_clamped
            or self.threshold_recomputed
        )


def reconcile_snapshot(
    snapshot: DecodedSnapshot,
    catalog: Catalog,
    settings: ProgressionSettings,
) -> Tuple[ProgressionState, ReconcileReport]:
    """
    Merge a decoded snapshot into the current catalog.

    - Catalog entries found discovered in the snapshot take the snapshot copy
    - Catalog entries unknown to the snapshot start undiscovered
    - Snapshot records whose id left the catalog are dropped
    - Counters are recounted from the merged records when they disagree
    - ``max_energy`` and the level threshold follow current settings;
      energy is clamped into ``[0, max_energy]``
    """
    report = ReconcileReport()

    saved: Dict[str, DiscoveryRecord] = {}
    order: List[str] = []
    for record in snapshot.discovered:
        if record.id in saved:
            report.duplicate_ids.append(record.id)
            continue
        if record.id not in catalog:
            report.orphaned_ids.append(record.id)
            continue
        saved[record.id] = record
        order.append(record.id)

    records = [saved.get(entry.id) or DiscoveryRecord(entry=entry) for entry in catalog]
    report.undiscovered_entries = sum(1 for entry in catalog if entry.id not in saved)

    max_energy = settings.max_energy
    energy = min(max(snapshot.energy, 0), max_energy)
    report.energy_clamped = energy != snapshot.energy

    threshold = xp_to_next_level(snapshot.level, settings.xp_per_level)
    report.threshold_recomputed = threshold != snapshot.xp_to_next_level

    progress = UserProgress(
        level=snapshot.level,
        xp=snapshot.xp,
        xp_to_next_level=threshold,
        energy=energy,
        max_energy=max_energy,
        last_energy_refill=snapshot.last_energy_refill,
        total_discovered=snapshot.total_discovered,
        discovered_by_type=snapshot.discovered_by_type,
    )
    state = ProgressionState(
        progress=progress,
        records=records,
        discovered_ids=order,
        last_explore_time=snapshot.last_explore_time,
    )

    if not state.is_consistent():
        total, by_type = state.count_discovered()
        progress.replace_counts(total, by_type)
        report.recounted = True

    return state, report


def restore_state(
    payload: str,
    catalog: Catalog,
    settings: ProgressionSettings,
) -> Tuple[ProgressionState, ReconcileReport]:
    """Decode and reconcile in one step."""
    return reconcile_snapshot(decode_snapshot(payload), catalog, settings)