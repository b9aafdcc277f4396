"""Collection missions: definitions loaded from YAML and on-demand progress."""

from stargazer.modules.missions.service import (
    MissionDefinition,
    MissionProgress,
    MissionReward,
    MissionTracker,
    MissionType,
    load_missions,
    parse_missions,
)

__all__ = [
    "MissionDefinition",
    "MissionProgress",
    "MissionReward",
    "MissionTracker",
    "MissionType",
    "load_missions",
    "parse_missions",
]
