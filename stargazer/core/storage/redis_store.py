"""
Redis slot store.

Each slot is a plain string key under a namespace prefix
(``stargazer:slot:<slot>``). Saves never expire: a save slot is durable
state, not a cache entry.
"""

from __future__ import annotations

import time
from typing import Optional

from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError

from stargazer.core.exceptions import PersistenceError, StorageNotInitializedError
from stargazer.core.logging.logger import get_logger
from stargazer.core.storage.base import SlotStore

logger = get_logger(__name__)


class RedisSlotStore(SlotStore):
    """
    Args:
        url: Redis connection string
        socket_timeout: Socket timeout in seconds
        key_prefix: Namespace prepended to every slot name
        client: Pre-built client (tests inject a mock here)
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        socket_timeout: int = 5,
        key_prefix: str = "stargazer:slot:",
        client: Optional[AsyncRedis] = None,
    ) -> None:
        super().__init__()
        self._url = url
        self._socket_timeout = socket_timeout
        self._key_prefix = key_prefix
        self._client = client
        self._owns_client = client is None

    def _key(self, slot: str) -> str:
        return f"{self._key_prefix}{slot}"

    @property
    def client(self) -> AsyncRedis:
        self._ensure_initialized()
        if self._client is None:
            raise StorageNotInitializedError(type(self).__name__)
        return self._client

    async def initialize(self) -> None:
        if self.is_initialized:
            logger.debug("RedisSlotStore already initialized, skipping")
            return

        start_time = time.monotonic()
        if self._client is None:
            self._client = AsyncRedis.from_url(
                self._url,
                socket_timeout=self._socket_timeout,
                encoding="utf-8",
                decode_responses=True,
            )

        try:
            await self._client.ping()
        except RedisError as exc:
            if self._owns_client:
                await self._client.aclose()
                self._client = None
            logger.critical(
                "Failed to initialize RedisSlotStore",
                extra={
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                    "url_scheme": self._url.split("://")[0] if "://" in self._url else "unknown",
                },
                exc_info=True,
            )
            raise PersistenceError("initialize", self._key_prefix, exc) from exc

        await super().initialize()
        logger.info(
            "RedisSlotStore initialized",
            extra={
                "key_prefix": self._key_prefix,
                "initialization_time_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )

    async def shutdown(self) -> None:
        if not self.is_initialized:
            return
        await super().shutdown()
        if self._owns_client and self._client is not None:
            client, self._client = self._client, None
            try:
                await client.aclose()
                logger.info("RedisSlotStore shutdown complete")
            except RedisError as exc:
                logger.error(
                    "Error during RedisSlotStore shutdown",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )

    async def get(self, slot: str) -> Optional[str]:
        try:
            value = await self.client.get(self._key(slot))
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except (RedisError, UnicodeDecodeError) as exc:
            raise PersistenceError("get", slot, exc) from exc

        logger.debug("Redis slot GET", extra={"slot": slot, "found": value is not None})
        return value

    async def set(self, slot: str, payload: str) -> None:
        try:
            await self.client.set(self._key(slot), payload)
        except RedisError as exc:
            raise PersistenceError("set", slot, exc) from exc
        logger.debug("Redis slot SET", extra={"slot": slot, "bytes": len(payload)})

    async def delete(self, slot: str) -> None:
        try:
            await self.client.delete(self._key(slot))
        except RedisError as exc:
            raise PersistenceError("delete", slot, exc) from exc
