from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stargazer.database.base import Base, IdMixin, TimestampMixin


class SaveSlot(Base, IdMixin, TimestampMixin):
    """
    One named save slot holding a serialized progression snapshot.

    Schema-only model:
    - slot_key: unique slot name (e.g. "gameState")
    - payload: the snapshot JSON text, stored verbatim
    - created_at / updated_at: timestamps from TimestampMixin
    """

    __tablename__ = "save_slots"

    slot_key: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    payload: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SaveSlot(slot_key={self.slot_key!r}, bytes={len(self.payload)})>"
