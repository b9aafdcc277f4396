"""
Domain model foundations for Stargazer.

Purpose
-------
Shared building blocks for the progression aggregates: buffered domain
events and the validation error raised when a rule is broken.

Responsibilities
----------------
- Buffer ``DomainEvent``s on an aggregate until its owner drains them
- ``DomainValidationError`` plus the bound checks the models repeat

Non-Responsibilities
--------------------
- Publishing events (the engine hands drained events to the EventBus)
- Persistence (the persistence gateway)

Usage Example
-------------
>>> class Progress(AggregateRoot):
...     def gain(self, amount: int) -> None:
...         validate_positive(amount, "amount")
...         self.add_domain_event("player.experience_gained", {"amount": amount})
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    Something that happened to an aggregate.

    Attributes
    ----------
    event_name : str
        Dotted name, also used as the bus event name ("player.leveled_up")
    payload : Dict[str, Any]
        Bus payload
    occurred_at : datetime
        UTC instant the aggregate recorded it
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AggregateRoot:
    """
    Aggregate that records events during a state change.

    Events stay buffered so that a rejected operation never publishes
    anything; the engine drains them after the change has been applied.
    """

    def __init__(self) -> None:
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """Drain the buffer, oldest event first."""
        drained, self._domain_events = self._domain_events, []
        return drained

    def get_pending_events(self) -> List[DomainEvent]:
        return list(self._domain_events)


# ============================================================================
# VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """
    A progression rule or catalog field check failed.

    ``field`` names the offending attribute when there is one, so the
    catalog loader and snapshot decoder can report where the data is bad.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    if value <= 0:
        raise DomainValidationError(f"{field_name} must be positive, got {value}", field=field_name)


def validate_non_negative(value: int, field_name: str) -> None:
    if value < 0:
        raise DomainValidationError(f"{field_name} must be non-negative, got {value}", field=field_name)


def validate_not_empty(value: str, field_name: str) -> None:
    """Reject empty and whitespace-only strings."""
    if not value or not value.strip():
        raise DomainValidationError(f"{field_name} cannot be empty", field=field_name)
