"""Key-value store implementations."""

from rolegate.implementations.store.memory import MemoryStore
from rolegate.implementations.store.redis import RedisStore

__all__ = ["MemoryStore", "RedisStore"]
