"""Exploration: rarity-weighted sampling and the progression engine."""

from stargazer.modules.exploration.sampling import SamplingPolicy
from stargazer.modules.exploration.service import (
    CollectionCompletion,
    ExplorationResult,
    ProgressionEngine,
)

__all__ = [
    "CollectionCompletion",
    "ExplorationResult",
    "ProgressionEngine",
    "SamplingPolicy",
]
