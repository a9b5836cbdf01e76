"""
Redis key-value store implementation.
"""

from __future__ import annotations

import json
from typing import Any
from datetime import timedelta

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()


class RedisStore:
    """
    Redis-backed store, shared by every process pointing at the same server.

    Usage:
        store = RedisStore(redis_url="redis://localhost:6379/0", prefix="rolegate:")
        await store.connect()

        await store.set("intendedPath:42", "/invoices", ttl=3600)
        path = await store.pop("intendedPath:42")
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "",
        default_ttl: int | None = None,
        client: redis.Redis | None = None,
    ):
        self.redis_url = redis_url
        self.prefix = prefix
        self.default_ttl = default_ttl
        self._client: redis.Redis | None = client

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("store.connected", backend="redis")

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Store not connected. Call connect() first.")
        return self._client

    def _key(self, key: str) -> str:
        """Prepend prefix to key."""
        return f"{self.prefix}{key}" if self.prefix else key

    def _ttl_seconds(self, ttl: int | timedelta | None) -> int | None:
        """Convert TTL to seconds."""
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, timedelta):
            return int(ttl.total_seconds())
        return ttl

    def _serialize(self, value: Any) -> str:
        return json.dumps(value)

    def _deserialize(self, value: str | None) -> Any:
        if value is None:
            return None
        return json.loads(value)

    async def get(self, key: str) -> Any | None:
        value = await self.client.get(self._key(key))
        return self._deserialize(value)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        ttl_seconds = self._ttl_seconds(ttl)
        result = await self.client.set(
            self._key(key),
            self._serialize(value),
            ex=ttl_seconds or None,
        )
        return bool(result)

    async def delete(self, key: str) -> bool:
        return await self.client.delete(self._key(key)) > 0

    async def exists(self, key: str) -> bool:
        return await self.client.exists(self._key(key)) > 0

    async def pop(self, key: str) -> Any | None:
        # GETDEL is atomic, so two tabs cannot both consume the value
        value = await self.client.getdel(self._key(key))
        return self._deserialize(value)
