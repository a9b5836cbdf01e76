"""
In-memory key-value store.
"""

from __future__ import annotations

from typing import Any
from datetime import datetime, timedelta
from dataclasses import dataclass

from rolegate.utils.timezone import Clock, utc_now


@dataclass
class StoreEntry:
    """Stored value with expiration."""
    value: Any
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class MemoryStore:
    """
    In-memory store for a single process.

    Note: Data is not persisted and not shared between processes.

    Usage:
        store = MemoryStore()
        await store.set("intendedPath:42", "/invoices", ttl=3600)
        path = await store.pop("intendedPath:42")
    """

    def __init__(self, default_ttl: int | None = None, clock: Clock = utc_now):
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: dict[str, StoreEntry] = {}

    def _ttl_seconds(self, ttl: int | timedelta | None) -> float | None:
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, timedelta):
            return ttl.total_seconds()
        return ttl

    def _live_entry(self, key: str) -> StoreEntry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        return entry.value if entry else None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        ttl_seconds = self._ttl_seconds(ttl)
        expires_at = None
        if ttl_seconds:
            expires_at = self._clock() + timedelta(seconds=ttl_seconds)

        self._store[key] = StoreEntry(value=value, expires_at=expires_at)
        return True

    async def delete(self, key: str) -> bool:
        if key in self._store:
            del self._store[key]
            return True
        return False

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def pop(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        del self._store[key]
        return entry.value

    def clear(self) -> None:
        self._store.clear()
