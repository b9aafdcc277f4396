from __future__ import annotations

from typing import Dict, Optional

from stargazer.core.storage.base import SlotStore


class MemorySlotStore(SlotStore):
    """
    Process-local slot store.

    Used by tests and by headless runs that should not touch disk. Contents
    survive ``shutdown()``/``initialize()`` cycles of the same instance.
    """

    def __init__(self) -> None:
        super().__init__()
        self._slots: Dict[str, str] = {}

    async def get(self, slot: str) -> Optional[str]:
        self._ensure_initialized()
        return self._slots.get(slot)

    async def set(self, slot: str, payload: str) -> None:
        self._ensure_initialized()
        self._slots[slot] = payload

    async def delete(self, slot: str) -> None:
        self._ensure_initialized()
        self._slots.pop(slot, None)
