"""
Build backend implementations from settings.
"""

from rolegate.core.config import RoutingSettings
from rolegate.core.interfaces import KeyValueStore


def create_store(settings: RoutingSettings) -> KeyValueStore:
    """
    Create the intended-path store selected by ROUTING_STORE_BACKEND.

    RedisStore still needs `await store.connect()` before use.
    """
    if settings.store_backend == "redis":
        from rolegate.implementations.store.redis import RedisStore
        return RedisStore(
            redis_url=settings.redis_url,
            prefix=settings.redis_prefix,
            default_ttl=settings.intended_path_ttl_seconds,
        )

    from rolegate.implementations.store.memory import MemoryStore
    return MemoryStore(default_ttl=settings.intended_path_ttl_seconds)
