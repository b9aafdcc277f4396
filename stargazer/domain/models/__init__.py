"""
Domain models for Stargazer.

Rich models hold the progression rules; services orchestrate them and turn
their domain events into bus events.
"""

from stargazer.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
)
from stargazer.domain.models.catalog import (
    Catalog,
    CatalogEntry,
    DiscoveryRecord,
    ObjectType,
    Rarity,
)
from stargazer.domain.models.progress import ProgressView, UserProgress
from stargazer.domain.models.state import ProgressionState

__all__ = [
    "AggregateRoot",
    "Catalog",
    "CatalogEntry",
    "DiscoveryRecord",
    "DomainEvent",
    "DomainValidationError",
    "ObjectType",
    "ProgressView",
    "ProgressionState",
    "Rarity",
    "UserProgress",
]
