"""Cache infrastructure - backend implementations."""

from .cache_factory import CacheBackend, create_cache
from .diskcache_adapter import DiskcacheAdapter
from .memory_adapter import MemoryLRUAdapter
from .redis_adapter import RedisAdapter

__all__ = [
    "CacheBackend",
    "DiskcacheAdapter",
    "MemoryLRUAdapter",
    "RedisAdapter",
    "create_cache",
]
