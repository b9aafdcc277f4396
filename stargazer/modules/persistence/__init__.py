"""Snapshot persistence: JSON codec, catalog reconciliation and the gateway."""

from stargazer.modules.persistence.service import DEFAULT_SLOT, PersistenceGateway
from stargazer.modules.persistence.snapshot import (
    DecodedSnapshot,
    ReconcileReport,
    decode_snapshot,
    encode_snapshot,
    reconcile_snapshot,
)

__all__ = [
    "DEFAULT_SLOT",
    "DecodedSnapshot",
    "PersistenceGateway",
    "ReconcileReport",
    "decode_snapshot",
    "encode_snapshot",
    "reconcile_snapshot",
]
