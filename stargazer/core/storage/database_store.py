"""
SQL slot store on SQLAlchemy 2.0 async.

Purpose
-------
Keep save slots as rows of the ``save_slots`` table so a snapshot lives in
the same database as anything else the host application stores.

Design Notes
------------
- ``initialize()`` builds the engine and session factory and creates the
  table if missing
- Every mutation runs inside ``session.begin()``: commit on success,
  rollback and re-raise on failure
- Upsert is select-then-update/insert inside one transaction, which works
  on every dialect (SQLite, PostgreSQL)
- ``SQLAlchemyError`` is wrapped in ``PersistenceError``

Usage
-----
>>> store = DatabaseSlotStore("sqlite+aiosqlite:///stargazer.db")
>>> await store.initialize()
>>> await store.set("gameState", payload)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from stargazer.core.exceptions import PersistenceError, StorageNotInitializedError
from stargazer.core.logging.logger import get_logger
from stargazer.core.storage.base import SlotStore
from stargazer.database.base import Base
from stargazer.database.models import SaveSlot

logger = get_logger(__name__)


class DatabaseSlotStore(SlotStore):
    def __init__(self, url: str, echo: bool = False) -> None:
        super().__init__()
        self._url = url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def url_scheme(self) -> str:
        return self._url.split(":", 1)[0]

    async def initialize(self) -> None:
        """
        Create the engine and ensure the schema exists.

        Idempotent. Raises PersistenceError when the database is unreachable.
        """
        if self.is_initialized:
            logger.debug("DatabaseSlotStore already initialized; skipping")
            return

        engine_kwargs: Dict[str, Any] = {"echo": self._echo}
        self._engine = create_async_engine(self._url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.error(
                "DatabaseSlotStore initialization failed",
                extra={
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                    "url_scheme": self.url_scheme,
                },
                exc_info=True,
            )
            raise PersistenceError("initialize", SaveSlot.__tablename__, exc) from exc

        await super().initialize()
        logger.info("DatabaseSlotStore initialized", extra={"url_scheme": self.url_scheme})

    async def shutdown(self) -> None:
        if self._engine is None:
            logger.debug("DatabaseSlotStore not initialized; nothing to shutdown")
            return
        try:
            await self._engine.dispose()
            logger.info("DatabaseSlotStore shutdown complete")
        finally:
            self._engine = None
            self._session_factory = None
            await super().shutdown()

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[AsyncSession, None]:
        self._ensure_initialized()
        if self._session_factory is None:
            raise StorageNotInitializedError(type(self).__name__)
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def get(self, slot: str) -> Optional[str]:
        try:
            async with self._transaction() as session:
                result = await session.execute(
                    select(SaveSlot.payload).where(SaveSlot.slot_key == slot)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("get", slot, exc) from exc

    async def set(self, slot: str, payload: str) -> None:
        try:
            async with self._transaction() as session:
                result = await session.execute(
                    select(SaveSlot).where(SaveSlot.slot_key == slot)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    session.add(SaveSlot(slot_key=slot, payload=payload))
                else:
                    row.payload = payload
        except SQLAlchemyError as exc:
            raise PersistenceError("set", slot, exc) from exc

        logger.debug("Database slot saved", extra={"slot": slot, "bytes": len(payload)})

    async def delete(self, slot: str) -> None:
        try:
            async with self._transaction() as session:
                await session.execute(delete(SaveSlot).where(SaveSlot.slot_key == slot))
        except SQLAlchemyError as exc:
            raise PersistenceError("delete", slot, exc) from exc
