"""Diskcache adapter - SQLite-based cache without daemon process."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)


def _trim_to(cache: DiskCache, max_entries: int) -> int:
    """Drop the earliest-inserted entries until at most ``max_entries`` remain."""
    if len(cache) <= max_entries:
        return 0
    cache.expire()
    evicted = 0
    while len(cache) > max_entries:
        try:
            key, _ = cache.peekitem(last=False)
        except KeyError:
            break
        if cache.delete(key):
            evicted += 1
    return evicted


class DiskcacheAdapter:
    """Async wrapper for diskcache.Cache (sync-only library).

    - Uses `asyncio.to_thread` for I/O (no blocking of the event loop).
    - Semaphore prevents too many parallel disk writes (SQLite lock contention).
    - Each namespace lives in its own sub-directory so result kinds never
      share keys or eviction.
    - At most ``max_entries`` live entries; after a write that overflows,
      the earliest-inserted entries are dropped. ``size_limit`` bytes stays as
      a second, least-recently-used bound.

    Args:
        directory: Root directory; the namespace is appended.
        namespace: Sub-directory name (e.g. ``streams``).
        ttl_seconds: Default TTL for `set()` without explicit value.
        max_entries: Live-entry bound for this namespace.
        max_concurrent: Max parallel disk ops.
        size_limit: Byte budget before LRU culling kicks in.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/streamsnare",
        *,
        namespace: str = "default",
        ttl_seconds: int = 420,
        max_entries: int = 500,
        max_concurrent: int = 10,
        size_limit: int = 64 * 1024 * 1024,
    ) -> None:
        self.directory = Path(directory) / namespace
        self.namespace = namespace
        self.default_ttl = ttl_seconds
        self.max_entries = max_entries
        self.size_limit = size_limit
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

        log.info(
            "diskcache_adapter_init",
            directory=str(self.directory),
            default_ttl=ttl_seconds,
            max_entries=max_entries,
            max_concurrent=max_concurrent,
        )

    async def __aenter__(self) -> DiskcacheAdapter:
        """Open the SQLite cache (idempotent)."""
        if self._cache is None:
            self._cache = await asyncio.to_thread(
                DiskCache,
                str(self.directory),
                eviction_policy="least-recently-used",
                size_limit=self.size_limit,
            )
            log.info("diskcache_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", directory=str(self.directory))

    def _require(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Cache not initialized. Use 'async with cache:' or await cache.__aenter__()"
            )
        return self._cache

    async def get(self, key: str) -> Optional[Any]:
        cache = self._require()
        async with self._semaphore:
            value = await asyncio.to_thread(cache.get, key, default=None)
            log.debug("cache_get", namespace=self.namespace, key=key, hit=value is not None)
            return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        cache = self._require()
        expire_time = ttl if ttl is not None else self.default_ttl

        async with self._semaphore:
            await asyncio.to_thread(
                cache.set,
                key,
                value,
                expire=expire_time if expire_time > 0 else None,
            )
            evicted = await asyncio.to_thread(_trim_to, cache, self.max_entries)
            log.debug("cache_set", namespace=self.namespace, key=key, ttl=expire_time)
            if evicted:
                log.debug("cache_evict", namespace=self.namespace, evicted=evicted)

    async def delete(self, key: str) -> bool:
        if self._cache is None:
            return False

        async with self._semaphore:
            deleted = await asyncio.to_thread(self._cache.delete, key)
            log.debug("cache_delete", key=key, deleted=deleted)
            return bool(deleted)

    async def exists(self, key: str) -> bool:
        if self._cache is None:
            return False

        cache = self._cache
        async with self._semaphore:
            # __contains__ honours expiry.
            return await asyncio.to_thread(cache.__contains__, key)

    async def clear(self) -> None:
        if self._cache is None:
            return

        async with self._semaphore:
            await asyncio.to_thread(self._cache.clear)
            log.warning("cache_cleared", directory=str(self.directory))
