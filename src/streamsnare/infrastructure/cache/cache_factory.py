"""Cache factory - builds an adapter for the configured backend."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import structlog

from streamsnare.domain.ports.cache import CachePort
from streamsnare.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from streamsnare.infrastructure.cache.memory_adapter import MemoryLRUAdapter
from streamsnare.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["memory", "diskcache", "redis"]


def create_cache(
    backend: CacheBackend = "memory",
    *,
    namespace: str = "default",
    max_entries: int = 500,
    directory: str | Path = "./.cache/streamsnare",
    redis_url: str = "redis://localhost:6379/0",
    ttl_seconds: int = 420,
    max_concurrent: int = 10,
) -> CachePort:
    """Create the cache adapter for ``backend``.

    Args:
        backend: "memory" (in-process LRU), "diskcache" (SQLite) or "redis".
        namespace: Logical cache name; isolates keys per result kind.
        max_entries: Entry bound for memory and diskcache (Redis relies on TTLs).
        directory: Diskcache root directory.
        redis_url: Redis connection string.
        ttl_seconds: Default TTL for all backends.
        max_concurrent: Semaphore limit for diskcache (Redis uses 50).

    Raises:
        ValueError: If `backend` is unknown.
    """
    log.info("cache_factory_create", backend=backend, namespace=namespace, ttl=ttl_seconds)

    if backend == "memory":
        return MemoryLRUAdapter(
            max_entries=max_entries,
            ttl_seconds=ttl_seconds,
            namespace=namespace,
        )
    if backend == "diskcache":
        return DiskcacheAdapter(
            directory=directory,
            namespace=namespace,
            ttl_seconds=ttl_seconds,
            max_entries=max_entries,
            max_concurrent=max_concurrent,
        )
    if backend == "redis":
        return RedisAdapter(
            url=redis_url,
            namespace=namespace,
            ttl_seconds=ttl_seconds,
            max_concurrent=50,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory', 'diskcache' or 'redis'."
    )
