"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from stargazer.database.models.save_slot import SaveSlot

__all__ = ["SaveSlot"]
