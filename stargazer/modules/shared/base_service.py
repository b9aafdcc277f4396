"""
Base Service Foundation

Purpose
-------
Common base for Stargazer services: structured logging, access to the
validated balance settings and event emission.

What this class does NOT do:
- Own storage (the persistence gateway does)
- Contain game rules (domain models and policies do)

Usage
-----
    class MissionTracker(BaseService):
        def __init__(self, missions, settings, event_bus):
            super().__init__(settings, event_bus, get_logger(__name__))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from stargazer.modules.shared.exceptions import get_error_severity

if TYPE_CHECKING:
    from logging import Logger

    from stargazer.core.config.manager import ProgressionSettings
    from stargazer.core.event.bus import EventBus
    from stargazer.domain.models.base import DomainEvent


class BaseService:
    """
    Args:
        settings: Validated balance settings
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        settings: ProgressionSettings,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self.settings = settings
        self.events = event_bus
        self.log = logger

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Publish an event on the bus.

        Args:
            event_type: Type/name of the event
            data: Event payload data
            context: Optional additional context merged into the payload
        """
        await self.events.publish(event_type, {**data, **(context or {})})

    async def emit_domain_events(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            await self.emit_event(event.event_name, event.payload)

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """Log ``error`` at the level its severity asks for (ERROR when unknown)."""
        level = getattr(logging, get_error_severity(error).value.upper())
        self.log.log(
            level,
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_code": getattr(error, "error_code", None),
                **context,
            },
        )
