"""
Save-slot storage backends.

``build_slot_store()`` picks the backend named by ``Config.STORAGE_BACKEND``;
backends with heavier dependencies are imported only when selected.
"""

from __future__ import annotations

from typing import Optional, Type

from stargazer.core.config.config import Config, StorageBackend
from stargazer.core.storage.base import SlotStore
from stargazer.core.storage.file_store import FileSlotStore
from stargazer.core.storage.memory import MemorySlotStore


def build_slot_store(config: Optional[Type[Config]] = None) -> SlotStore:
    """Instantiate (but do not initialize) the configured slot store."""
    config = config or Config
    backend = config.STORAGE_BACKEND

    if backend is StorageBackend.MEMORY:
        return MemorySlotStore()
    if backend is StorageBackend.REDIS:
        from stargazer.core.storage.redis_store import RedisSlotStore

        return RedisSlotStore(url=config.REDIS_URL, socket_timeout=config.REDIS_SOCKET_TIMEOUT)
    if backend is StorageBackend.DATABASE:
        from stargazer.core.storage.database_store import DatabaseSlotStore

        return DatabaseSlotStore(url=config.DATABASE_URL, echo=config.DATABASE_ECHO)
    return FileSlotStore(directory=config.SAVE_DIR)


__all__ = [
    "FileSlotStore",
    "MemorySlotStore",
    "SlotStore",
    "build_slot_store",
]
