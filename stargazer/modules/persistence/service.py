"""
Persistence Gateway

Purpose
-------
Save, load and reset the progression snapshot in a single named slot.

Failure Policy
--------------
Persistence never takes the game down:
- ``save`` and ``reset`` log failures and return False
- ``load`` logs corrupt or unreadable snapshots and returns None, which the
  engine treats as "start fresh"

Only ``StorageNotInitializedError`` is allowed through, because it is a
wiring bug rather than a runtime condition.
"""

from __future__ import annotations

from typing import Optional

from stargazer.core.config.manager import ProgressionSettings
from stargazer.core.exceptions import (
    PersistenceError,
    StorageNotInitializedError,
    is_transient_error,
)
from stargazer.core.logging.logger import get_logger
from stargazer.core.storage.base import SlotStore
from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import Catalog
from stargazer.domain.models.state import ProgressionState
from stargazer.modules.persistence.snapshot import encode_snapshot, restore_state
from stargazer.modules.shared.exceptions import CorruptSnapshotError

logger = get_logger(__name__)

DEFAULT_SLOT = "gameState"


class PersistenceGateway:
    """
    Args:
        store: Initialized slot store
        settings: Balance settings used to reconcile loaded snapshots
        slot: Slot name (default "gameState")
    """

    def __init__(
        self,
        store: SlotStore,
        settings: ProgressionSettings,
        slot: str = DEFAULT_SLOT,
    ) -> None:
        self._store = store
        self._settings = settings
        self.slot = slot

    async def save(self, state: ProgressionState) -> bool:
        try:
            payload = encode_snapshot(state)
            await self._store.set(self.slot, payload)
        except StorageNotInitializedError:
            raise
        except (PersistenceError, TypeError, ValueError) as exc:
            logger.error(
                "Failed to save progress snapshot",
                extra={
                    "slot": self.slot,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                    "retryable": is_transient_error(exc),
                },
                exc_info=True,
            )
            return False

        logger.debug(
            "Progress snapshot saved",
            extra={"slot": self.slot, "bytes": len(payload), "discovered": state.progress.total_discovered},
        )
        return True

    async def load(self, catalog: Catalog) -> Optional[ProgressionState]:
        try:
            payload = await self._store.get(self.slot)
        except StorageNotInitializedError:
            raise
        except PersistenceError as exc:
            logger.error(
                "Failed to read progress snapshot, starting fresh",
                extra={"slot": self.slot, "error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            return None

        if payload is None:
            logger.info("No progress snapshot found", extra={"slot": self.slot})
            return None

        try:
            try:
                state, report = restore_state(payload, catalog, self._settings)
            except DomainValidationError as exc:
                raise CorruptSnapshotError(str(exc), slot=self.slot) from exc
        except CorruptSnapshotError as exc:
            logger.warning(
                "Corrupt progress snapshot ignored",
                extra={
                    "slot": self.slot,
                    "error_code": exc.error_code,
                    "reason": exc.reason,
                    "bytes": len(payload),
                },
            )
            return None

        if report.orphaned_ids or report.duplicate_ids:
            logger.warning(
                "Dropped snapshot records not matching the catalog",
                extra={
                    "slot": self.slot,
                    "orphaned_ids": report.orphaned_ids,
                    "duplicate_ids": report.duplicate_ids,
                },
            )
        if report.recounted:
            logger.warning(
                "Snapshot discovery counters disagreed with records, recounted",
                extra={"slot": self.slot, "total_discovered": state.progress.total_discovered},
            )
        if report.energy_clamped or report.threshold_recomputed:
            logger.info(
                "Snapshot adjusted to current settings",
                extra={
                    "slot": self.slot,
                    "energy_clamped": report.energy_clamped,
                    "threshold_recomputed": report.threshold_recomputed,
                },
            )

        logger.info(
            "Progress snapshot loaded",
            extra={
                "slot": self.slot,
                "level": state.progress.level,
                "total_discovered": state.progress.total_discovered,
                "undiscovered_entries": report.undiscovered_entries,
            },
        )
        return state

    async def reset(self) -> bool:
        try:
            await self._store.delete(self.slot)
        except StorageNotInitializedError:
            raise
        except PersistenceError as exc:
            logger.error(
                "Failed to delete progress snapshot",
                extra={"slot": self.slot, "error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            return False

        logger.info("Progress snapshot deleted", extra={"slot": self.slot})
        return True
