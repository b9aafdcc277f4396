"""
Save-slot storage contract.

Purpose
-------
A slot store keeps opaque text payloads under string keys. The persistence
gateway serializes snapshots to JSON text; stores never look inside.

Contract
--------
- ``initialize()`` / ``shutdown()`` are idempotent
- ``get`` returns None for a missing slot
- ``set`` overwrites
- ``delete`` of a missing slot is not an error
- Driver failures are raised as ``PersistenceError``
- Use before ``initialize()`` raises ``StorageNotInitializedError``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from stargazer.core.exceptions import StorageNotInitializedError


class SlotStore(ABC):
    """Abstract async key -> text store for save slots."""

    def __init__(self) -> None:
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise StorageNotInitializedError(type(self).__name__)

    @abstractmethod
    async def get(self, slot: str) -> Optional[str]:
        """Return the payload stored under ``slot``, or None."""

    @abstractmethod
    async def set(self, slot: str, payload: str) -> None:
        """Store ``payload`` under ``slot``, replacing any previous value."""

    @abstractmethod
    async def delete(self, slot: str) -> None:
        """Remove ``slot`` if present."""
