"""
Key-value store protocol.
Implementations: MemoryStore, RedisStore

The guard keeps small per-user values here (the path a user tried to open
before being sent to login). Where the data lives is the deployment's
choice; the guard only sees this protocol.
"""
from __future__ import annotations

from typing import Protocol, Any
from datetime import timedelta


class KeyValueStore(Protocol):
    """
    Protocol for key-value stores.

    Values are JSON-serializable.
    """

    async def get(self, key: str) -> Any | None:
        """Get value by key. Returns None if not found or expired."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value with optional TTL (seconds or timedelta)."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if deleted."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        ...

    async def pop(self, key: str) -> Any | None:
        """Get and delete. Returns None if not found."""
        ...
