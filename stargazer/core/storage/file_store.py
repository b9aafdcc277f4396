"""
JSON-file slot store.

One file per slot (``<slot>.json``) in the platform user-data directory:

  Linux:   ~/.local/share/stargazer/
  macOS:   ~/Library/Application Support/stargazer/
  Windows: C:/Users/.../AppData/Local/stargazer/

Writes go to a temporary sibling file that atomically replaces the target,
so a crash mid-write leaves the previous save intact. Blocking file I/O runs
in a worker thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from platformdirs import user_data_dir

from stargazer.core.exceptions import PersistenceError
from stargazer.core.logging.logger import get_logger
from stargazer.core.storage.base import SlotStore

logger = get_logger(__name__)

DEFAULT_SAVE_DIR = Path(user_data_dir("stargazer"))

_SLOT_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileSlotStore(SlotStore):
    def __init__(self, directory: Optional[Path] = None) -> None:
        super().__init__()
        self.directory = Path(directory) if directory is not None else DEFAULT_SAVE_DIR

    async def initialize(self) -> None:
        try:
            await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError("initialize", str(self.directory), exc) from exc
        await super().initialize()
        logger.info("FileSlotStore initialized", extra={"directory": str(self.directory)})

    def path_for(self, slot: str) -> Path:
        if not _SLOT_NAME.match(slot) or slot in (".", ".."):
            raise ValueError(f"Invalid slot name: {slot!r}")
        return self.directory / f"{slot}.json"

    async def get(self, slot: str) -> Optional[str]:
        self._ensure_initialized()
        path = self.path_for(slot)
        try:
            return await asyncio.to_thread(self._read, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError("get", slot, exc) from exc

    async def set(self, slot: str, payload: str) -> None:
        self._ensure_initialized()
        path = self.path_for(slot)
        try:
            await asyncio.to_thread(self._write_atomic, path, payload)
        except OSError as exc:
            raise PersistenceError("set", slot, exc) from exc

    async def delete(self, slot: str) -> None:
        self._ensure_initialized()
        path = self.path_for(slot)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise PersistenceError("delete", slot, exc) from exc

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @staticmethod
    def _write_atomic(path: Path, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
