"""
Mission Tracker

Purpose
-------
Evaluate progress toward collection missions from the engine's current
state. Missions are read-only goals: progress is derived on demand, nothing
is stored and no reward is granted.

Mission kinds
-------------
- ``discover``: discovered objects, optionally restricted to one object type
- ``level``: current player level
- ``collect``: discovered objects at or above a minimum rarity

The tracker subscribes to ``exploration.discovered`` and logs (and
publishes ``mission.completed`` for) each mission the moment it completes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import yaml

from stargazer.core.config.errors import ConfigValidationError
from stargazer.core.event.bus import EventPayload
from stargazer.core.logging.logger import get_logger
from stargazer.domain.models.catalog import ObjectType, Rarity
from stargazer.modules.shared.base_service import BaseService
from stargazer.modules.shared.formulas import capped_percentage

if TYPE_CHECKING:
    from stargazer.modules.exploration.service import ProgressionEngine

logger = get_logger(__name__)

BUNDLED_MISSIONS = "missions.yaml"


class MissionType(str, enum.Enum):
    DISCOVER = "discover"
    LEVEL = "level"
    COLLECT = "collect"


@dataclass(frozen=True)
class MissionReward:
    xp: int = 0
    loot: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MissionDefinition:
    """
    Static mission template.

    Attributes
    ----------
    id, title, description : str
        Identity and presentation
    type : MissionType
        How progress is counted
    target : int
        Count needed to complete (positive)
    target_type : Optional[ObjectType]
        ``discover`` only: restrict to one object type
    min_rarity : Optional[Rarity]
        ``collect`` only: lowest rarity that counts
    reward : MissionReward
        Display-only reward description
    """

    id: str
    title: str
    description: str
    type: MissionType
    target: int
    target_type: Optional[ObjectType] = None
    min_rarity: Optional[Rarity] = None
    reward: MissionReward = field(default_factory=MissionReward)


@dataclass(frozen=True)
class MissionProgress:
    mission: MissionDefinition
    current: int
    target: int
    percentage: float
    completed: bool


# ============================================================================
# LOADING
# ============================================================================


def parse_missions(document: Any) -> List[MissionDefinition]:
    """
    Build mission definitions from a parsed YAML document.

    Raises:
        ConfigValidationError: Any mission is malformed or ids repeat.
    """
    items = document.get("missions") if isinstance(document, dict) else document
    if not isinstance(items, list):
        raise ConfigValidationError("missions", "expected a list of missions")

    missions: List[MissionDefinition] = []
    seen: Set[str] = set()
    for index, item in enumerate(items):
        key = f"missions[{index}]"
        if not isinstance(item, dict):
            raise ConfigValidationError(key, "must be a mapping")
        try:
            mission_type = MissionType(item["type"])
            target = item["target"]
            mission_id = str(item["id"])
            target_type = ObjectType(item["target_type"]) if item.get("target_type") else None
            min_rarity = Rarity(item["min_rarity"]) if item.get("min_rarity") else None
        except KeyError as exc:
            raise ConfigValidationError(key, f"missing field {exc.args[0]!r}") from exc
        except ValueError as exc:
            raise ConfigValidationError(key, str(exc)) from exc

        if isinstance(target, bool) or not isinstance(target, int) or target <= 0:
            raise ConfigValidationError(f"{key}.target", f"must be a positive integer, got {target!r}")
        if mission_type is MissionType.COLLECT and min_rarity is None:
            raise ConfigValidationError(f"{key}.min_rarity", "collect missions need a minimum rarity")
        if mission_id in seen:
            raise ConfigValidationError(f"{key}.id", f"duplicate mission id {mission_id!r}")
        seen.add(mission_id)

        reward_raw = item.get("reward") or {}
        reward = MissionReward(
            xp=int(reward_raw.get("xp", 0)),
            loot=tuple(str(x) for x in reward_raw.get("loot") or ()),
        )
        missions.append(
            MissionDefinition(
                id=mission_id,
                title=str(item.get("title", mission_id)),
                description=str(item.get("description", "")),
                type=mission_type,
                target=target,
                target_type=target_type,
                min_rarity=min_rarity,
                reward=reward,
            )
        )
    return missions


def load_missions(path: Optional[Union[str, Path]] = None) -> List[MissionDefinition]:
    """Load missions from ``path`` or the bundled definitions."""
    if path is None:
        text = resources.files("stargazer.data").joinpath(BUNDLED_MISSIONS).read_text(encoding="utf-8")
    else:
        text = Path(path).read_text(encoding="utf-8")
    missions = parse_missions(yaml.safe_load(text))
    logger.debug("Missions loaded", extra={"count": len(missions), "source": str(path or BUNDLED_MISSIONS)})
    return missions


# ============================================================================
# TRACKER
# ============================================================================


class MissionTracker(BaseService):
    """
    Example:
        >>> tracker = MissionTracker(engine, load_missions())
        >>> tracker.attach()
        >>> for row in tracker.evaluate():
        ...     print(row.mission.title, f"{row.percentage:.0f}%")
    """

    def __init__(self, engine: ProgressionEngine, missions: Sequence[MissionDefinition]) -> None:
        super().__init__(engine.settings, engine.events, logger)
        self._engine = engine
        self.missions: List[MissionDefinition] = list(missions)
        self._completed: Set[str] = set()
        self._listener_ids: List[str] = []

    def attach(self) -> None:
        if self._listener_ids:
            return
        self._sync_completed()
        self._listener_ids = [
            self.events.subscribe(
                "exploration.discovered", self._on_discovery, identifier="mission-tracker"
            ),
            self.events.subscribe(
                "progress.reset", self._on_reset, identifier="mission-tracker-reset"
            ),
        ]

    def detach(self) -> None:
        for listener_id in self._listener_ids:
            self.events.unsubscribe(listener_id)
        self._listener_ids = []

    def _sync_completed(self) -> None:
        # Missions already complete are not announced again.
        self._completed = {p.mission.id for p in self.evaluate() if p.completed}

    def current_value(self, mission: MissionDefinition) -> int:
        if mission.type is MissionType.LEVEL:
            return self._engine.progress.level

        discovered = self._engine.discovered
        if mission.type is MissionType.DISCOVER:
            if mission.target_type is None:
                return len(discovered)
            return sum(1 for r in discovered if r.type is mission.target_type)

        if mission.min_rarity is None:
            raise ConfigValidationError(f"missions.{mission.id}.min_rarity", "collect missions need a minimum rarity")
        return sum(1 for r in discovered if r.rarity >= mission.min_rarity)

    def progress_for(self, mission: MissionDefinition) -> MissionProgress:
        current = self.current_value(mission)
        return MissionProgress(
            mission=mission,
            current=current,
            target=mission.target,
            percentage=capped_percentage(current, mission.target),
            completed=current >= mission.target,
        )

    def evaluate(self) -> List[MissionProgress]:
        return [self.progress_for(mission) for mission in self.missions]

    def summary(self) -> Dict[str, int]:
        rows = self.evaluate()
        return {"total": len(rows), "completed": sum(1 for r in rows if r.completed)}

    async def _on_reset(self, payload: EventPayload) -> None:
        self._sync_completed()
        self.log.debug("Mission completions cleared", extra={"still_completed": len(self._completed)})

    async def _on_discovery(self, payload: EventPayload) -> None:
        for row in self.evaluate():
            if not row.completed or row.mission.id in self._completed:
                continue
            self._completed.add(row.mission.id)
            self.log.info(
                "Mission completed",
                extra={
                    "mission_id": row.mission.id,
                    "mission_type": row.mission.type.value,
                    "target": row.target,
                    "trigger_object": payload.get("object_id"),
                },
            )
            await self.emit_event(
                "mission.completed",
                {"mission_id": row.mission.id, "title": row.mission.title, "target": row.target},
            )
