"""Key-value storage behind the result caches."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async key-value store holding serialised result-cache entries.

    One instance exists per result kind (streams, categories, events,
    event streams, full crawls), each with its own namespace, entry bound
    and default TTL. Backend TTLs only reclaim storage; freshness is
    decided by ``ResultCacheRepository`` from the stored ``expiresAt``.

    Adapters: ``MemoryLRUAdapter`` (default), ``DiskcacheAdapter``,
    ``RedisAdapter``. All are opened and closed with ``async with``.
    """

    async def get(self, key: str) -> Any:
        """Stored value, or None when absent or past its backend TTL."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store ``value``; ``ttl`` overrides the instance default (0 = no TTL)."""
        ...

    async def delete(self, key: str) -> bool:
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def clear(self) -> None:
        """Drop every entry of this namespace only."""
        ...

    async def aclose(self) -> None:
        ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
