"""
Catalog Domain Model for Stargazer.

Purpose
-------
Immutable description of every discoverable celestial object and the
per-player discovery record wrapped around each one.

Responsibilities
----------------
- Closed enumerations for object type and (ordered) rarity tier
- ``CatalogEntry``: static template of a discoverable object
- ``DiscoveryRecord``: entry + one-way discovery timestamp
- ``Catalog``: ordered id -> entry index with duplicate detection

Non-Responsibilities
--------------------
- Loading catalog content from disk (``stargazer.modules.catalog.loader``)
- Choosing which entry gets discovered (``SamplingPolicy``)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from stargazer.domain.models.base import (
    DomainValidationError,
    validate_not_empty,
    validate_positive,
)


class ObjectType(str, enum.Enum):
    """Kinds of celestial objects in the catalog."""

    STAR = "Star"
    PLANET = "Planet"
    GALAXY = "Galaxy"
    EXOPLANET = "Exoplanet"
    NEBULA = "Nebula"
    BLACK_HOLE = "BlackHole"


class Rarity(str, enum.Enum):
    """
    Rarity tiers, ordered Common < Rare < Epic < Legendary.

    Comparison operators follow tier order rather than string order.
    """

    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank >= other.rank


@dataclass(frozen=True)
class CatalogEntry:
    """
    Immutable template of a discoverable object.

    Attributes
    ----------
    id : str
        Stable identifier, unique within the catalog
    name : str
        Display name
    type : ObjectType
        Object kind
    rarity : Rarity
        Tier driving sampling weight and reward size
    xp : int
        Experience granted on discovery
    image, lore : str
        Presentation payload, opaque to the engine
    loot : Tuple[str, ...]
        Flavor loot names
    stats : Mapping[str, str]
        Optional descriptive fields (size, distance, temperature, mass, age, specialty)
    """

    id: str
    name: str
    type: ObjectType
    rarity: Rarity
    xp: int
    image: str = ""
    loot: Tuple[str, ...] = ()
    lore: str = ""
    stats: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.name, "name")
        validate_positive(self.xp, "xp")
        if not isinstance(self.type, ObjectType):
            raise DomainValidationError(f"Unknown object type: {self.type!r}", field="type")
        if not isinstance(self.rarity, Rarity):
            raise DomainValidationError(f"Unknown rarity: {self.rarity!r}", field="rarity")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CatalogEntry":
        """
        Build an entry from a plain mapping (YAML catalog or save snapshot).

        Raises
        ------
        DomainValidationError
            Missing keys, unknown enum values or invalid numbers.
        """
        try:
            object_type = ObjectType(data["type"])
            rarity = Rarity(data["rarity"])
            xp = data["xp"]
            entry_id = data["id"]
            name = data["name"]
        except KeyError as e:
            raise DomainValidationError(f"Missing catalog field: {e.args[0]}", field=str(e.args[0])) from e
        except ValueError as e:
            raise DomainValidationError(str(e)) from e

        if isinstance(xp, bool) or not isinstance(xp, int):
            raise DomainValidationError(f"xp must be an integer, got {xp!r}", field="xp")
        if not isinstance(entry_id, str) or not isinstance(name, str):
            raise DomainValidationError("id and name must be strings")

        stats = data.get("stats") or {}
        loot = data.get("loot") or ()
        if not isinstance(stats, Mapping) or not isinstance(loot, (list, tuple)):
            raise DomainValidationError("stats must be a mapping and loot a list")

        return cls(
            id=entry_id,
            name=name,
            type=object_type,
            rarity=rarity,
            xp=xp,
            image=str(data.get("image", "")),
            loot=tuple(str(item) for item in loot),
            lore=str(data.get("lore", "")),
            stats={str(k): str(v) for k, v in stats.items() if v is not None},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "image": self.image,
            "rarity": self.rarity.value,
            "xp": self.xp,
            "loot": list(self.loot),
            "lore": self.lore,
            "stats": dict(self.stats),
        }


@dataclass(frozen=True)
class DiscoveryRecord:
    """
    A catalog entry bound to the player's discovery state.

    ``discovered`` is derived from ``discovered_at`` so the record can never
    be half-discovered. Discovery is one-way: ``discover()`` on an already
    discovered record raises.
    """

    entry: CatalogEntry
    discovered_at: Optional[datetime] = None

    @property
    def discovered(self) -> bool:
        return self.discovered_at is not None

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def type(self) -> ObjectType:
        return self.entry.type

    @property
    def rarity(self) -> Rarity:
        return self.entry.rarity

    def discover(self, at: datetime) -> "DiscoveryRecord":
        if self.discovered:
            raise DomainValidationError(
                f"{self.entry.id} was already discovered at {self.discovered_at.isoformat()}",
                field="discovered_at",
            )
        return DiscoveryRecord(entry=self.entry, discovered_at=at)


class Catalog:
    """
    Ordered, immutable index of catalog entries keyed by id.

    Iteration order is catalog order, which sampling relies on for
    reproducible draws.
    """

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        index: Dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.id in index:
                raise DomainValidationError(f"Duplicate catalog id: {entry.id}", field="id")
            index[entry.id] = entry
        self._entries = index

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def get(self, entry_id: str) -> Optional[CatalogEntry]:
        return self._entries.get(entry_id)

    def ids(self) -> List[str]:
        return list(self._entries)

    def count_by_type(self) -> Dict[ObjectType, int]:
        counts = {object_type: 0 for object_type in ObjectType}
        for entry in self._entries.values():
            counts[entry.type] += 1
        return counts
