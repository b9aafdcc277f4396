"""
Stargazer EventBus: async pub/sub for decoupling game modules.

Purpose
-------
Lets services announce state changes ("exploration.discovered",
"player.leveled_up", "energy.refilled") without knowing who listens.
The mission tracker and the headless runner are the in-tree subscribers.

Design Decisions
----------------
- **Instance-based**: every engine can own its bus; tests get a fresh one.
- **Wildcard support**: "exploration.*" and "*" patterns (fnmatch rules).
- **Sequential delivery**: listeners run in subscription order, sync or async.
- **Error isolation**: a failing listener is logged and never blocks the
  others, and never propagates into the publishing service.
"""

from __future__ import annotations

import inspect
import uuid
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from stargazer.core.logging.logger import get_logger

logger = get_logger(__name__)

EventPayload = Dict[str, Any]
CallbackType = Callable[[EventPayload], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class EventListener:
    pattern: str
    callback: CallbackType
    identifier: str


class EventBus:
    """
    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("player.leveled_up", on_level_up)
    >>> await bus.publish("player.leveled_up", {"old_level": 1, "new_level": 2})
    """

    def __init__(self) -> None:
        self._listeners: List[EventListener] = []
        self._published: Dict[str, int] = {}

    def subscribe(
        self,
        pattern: str,
        callback: CallbackType,
        *,
        identifier: Optional[str] = None,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later).

        Raises
        ------
        ValueError:
            If the pattern is empty or the callback does not take one argument.
        """
        if not pattern:
            raise ValueError("Event pattern cannot be empty")
        self._validate_callback_signature(callback)

        listener = EventListener(
            pattern=pattern,
            callback=callback,
            identifier=identifier or f"{getattr(callback, '__qualname__', 'listener')}:{uuid.uuid4().hex[:8]}",
        )
        self._listeners.append(listener)
        logger.debug(
            "EventBus: subscribed listener",
            extra={"pattern": pattern, "listener_id": listener.identifier},
        )
        return listener.identifier

    def unsubscribe(self, identifier: str) -> bool:
        before = len(self._listeners)
        self._listeners = [l for l in self._listeners if l.identifier != identifier]
        return len(self._listeners) != before

    def clear(self) -> None:
        self._listeners.clear()

    async def publish(self, event_name: str, data: EventPayload) -> int:
        """
        Deliver an event to every matching listener.

        Returns
        -------
        int:
            Number of listeners that completed without raising.
        """
        self._published[event_name] = self._published.get(event_name, 0) + 1
        listeners = [l for l in self._listeners if fnmatchcase(event_name, l.pattern)]

        delivered = 0
        for listener in listeners:
            try:
                result = listener.callback(data)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as exc:
                logger.error(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        logger.debug(
            "EventBus: published event",
            extra={"event_name": event_name, "listener_count": len(listeners)},
        )
        return delivered

    def get_listener_count(self, pattern: Optional[str] = None) -> int:
        if pattern is None:
            return len(self._listeners)
        return sum(1 for l in self._listeners if l.pattern == pattern)

    def get_publish_counts(self) -> Dict[str, int]:
        return dict(self._published)

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature; trust the caller.
            return

        if len(sig.parameters) != 1:
            name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(sig.parameters)} parameters for '{name}'"
            )
