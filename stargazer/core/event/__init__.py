"""
Event system for Stargazer.

No global bus: the engine owns an ``EventBus`` instance and hands it to
collaborators that want to subscribe.
"""

from .bus import CallbackType, EventBus, EventListener, EventPayload

__all__ = [
    "CallbackType",
    "EventBus",
    "EventListener",
    "EventPayload",
]
