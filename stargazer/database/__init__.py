"""
SQL schema for the database slot store.

Schema-only: models carry no business logic. ``DatabaseSlotStore`` owns the
engine and sessions.
"""

from stargazer.database.base import Base, IdMixin, TimestampMixin
from stargazer.database.models import SaveSlot

__all__ = ["Base", "IdMixin", "SaveSlot", "TimestampMixin"]
