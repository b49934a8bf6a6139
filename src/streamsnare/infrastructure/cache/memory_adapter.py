"""In-process LRU cache with per-entry TTL."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

import structlog

log = structlog.get_logger(__name__)


class MemoryLRUAdapter:
    """Bounded async key-value cache living in the current process.

    - Holds at most ``max_entries`` keys; inserting beyond that evicts the
      least recently used key.
    - Every entry carries its own deadline; expired entries read as absent
      and are dropped on access.
    - A single asyncio.Lock serializes mutations so concurrent requests
      never observe a half-applied eviction.

    Args:
        max_entries: Capacity (entries, not bytes).
        ttl_seconds: Default TTL for ``set()`` without explicit value.
            ``0`` or less stores without expiry.
        clock: Monotonic time source (seconds).
    """

    def __init__(
        self,
        max_entries: int = 500,
        ttl_seconds: int = 420,
        *,
        namespace: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.max_entries = max_entries
        self.default_ttl = ttl_seconds
        self.namespace = namespace
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Optional[float], Any]] = OrderedDict()
        self._lock = asyncio.Lock()

        log.info(
            "memory_cache_init",
            namespace=namespace,
            max_entries=max_entries,
            default_ttl=ttl_seconds,
        )

    async def __aenter__(self) -> MemoryLRUAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _live(self, key: str) -> tuple[bool, Any]:
        item = self._entries.get(key)
        if item is None:
            return False, None
        deadline, value = item
        if deadline is not None and self._clock() >= deadline:
            del self._entries[key]
            return False, None
        return True, value

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            found, value = self._live(key)
            if found:
                self._entries.move_to_end(key)
            log.debug("cache_get", namespace=self.namespace, key=key, hit=found)
            return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire_time = ttl if ttl is not None else self.default_ttl
        deadline = self._clock() + expire_time if expire_time > 0 else None

        async with self._lock:
            self._entries[key] = (deadline, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("cache_evict", namespace=self.namespace, key=evicted)
            log.debug("cache_set", namespace=self.namespace, key=key, ttl=expire_time)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        async with self._lock:
            found, _ = self._live(key)
            return found

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            log.warning("cache_cleared", namespace=self.namespace)
