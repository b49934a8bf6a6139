"""Port for fingerprint-keyed result caching."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from streamsnare.domain.entities.streams import CacheEntry

T = TypeVar("T")


@runtime_checkable
class ResultCachePort(Protocol[T]):
    """Async interface for storing resolved results by fingerprint.

    ``get`` never returns an entry whose ``expires_at`` has passed.
    """

    async def get(self, fingerprint: str) -> CacheEntry[T] | None: ...

    async def put(
        self, fingerprint: str, value: T, *, ttl_seconds: int | None = None
    ) -> CacheEntry[T]: ...
