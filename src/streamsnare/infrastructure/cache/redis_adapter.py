"""Redis adapter - async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
import pickle
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache with bounded concurrency.

    - Uses `redis.asyncio.Redis` (async-native, no to_thread needed).
    - Semaphore limits parallel Redis ops (prevents connection exhaustion).
    - Keys are prefixed with ``streamsnare:<namespace>:`` so several caches
      share one database and ``clear()`` only touches its own keys.
    - Read and write failures are logged and degrade to a cache miss.

    Args:
        url: Redis URL (e.g. `redis://localhost:6379/0`).
        namespace: Key prefix segment.
        ttl_seconds: Default TTL.
        max_concurrent: Max parallel Redis ops.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        namespace: str = "default",
        ttl_seconds: int = 420,
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.namespace = namespace
        self.default_ttl = ttl_seconds
        self._prefix = f"streamsnare:{namespace}:"
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

        log.info(
            "redis_adapter_init",
            url=url,
            namespace=namespace,
            default_ttl=ttl_seconds,
            max_concurrent=max_concurrent,
        )

    def _key(self, key: str) -> str:
        return self._prefix + key

    async def __aenter__(self) -> RedisAdapter:
        if self._client is None:
            self._client = Redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=False,
            )
            try:
                await self._client.ping()
                log.info("redis_connected", url=self.url, namespace=self.namespace)
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed", namespace=self.namespace)

    async def get(self, key: str) -> Any | None:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")

        async with self._semaphore:
            try:
                raw = await self._client.get(self._key(key))
                if raw is None:
                    log.debug("cache_miss", key=key)
                    return None
                log.debug("cache_hit", key=key)
                return pickle.loads(raw)
            except (RedisError, pickle.PickleError) as e:
                log.error("redis_get_error", key=key, error=str(e))
                return None

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        if self._client is None:
            raise RuntimeError("Redis not initialized.")

        expire_time = ttl if ttl is not None else self.default_ttl

        try:
            packed = pickle.dumps(value)
        except (pickle.PickleError, TypeError) as e:
            log.error("pickle_serialize_error", key=key, error=str(e))
            return

        async with self._semaphore:
            try:
                if expire_time > 0:
                    await self._client.setex(self._key(key), expire_time, packed)
                else:
                    await self._client.set(self._key(key), packed)
                log.debug("cache_set", key=key, ttl=expire_time, size_bytes=len(packed))
            except RedisError as e:
                log.error("redis_set_error", key=key, error=str(e))

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False

        async with self._semaphore:
            try:
                deleted = await self._client.delete(self._key(key))
                return deleted > 0
            except RedisError as e:
                log.error("redis_delete_error", key=key, error=str(e))
                return False

    async def exists(self, key: str) -> bool:
        if self._client is None:
            return False

        async with self._semaphore:
            try:
                return await self._client.exists(self._key(key)) > 0
            except RedisError as e:
                log.error("redis_exists_error", key=key, error=str(e))
                return False

    async def clear(self) -> None:
        """Delete every key under this adapter's namespace."""
        if self._client is None:
            return

        async with self._semaphore:
            try:
                removed = 0
                async for raw_key in self._client.scan_iter(match=self._prefix + "*"):
                    removed += await self._client.delete(raw_key)
                log.warning("redis_namespace_cleared", namespace=self.namespace, removed=removed)
            except RedisError as e:
                log.error("redis_clear_error", namespace=self.namespace, error=str(e))
