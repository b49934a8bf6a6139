"""Tests for RedisAdapter with a mocked client."""

from __future__ import annotations

import pickle
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import RedisError

from streamsnare.infrastructure.cache.redis_adapter import RedisAdapter


def _adapter(client: AsyncMock, **kwargs) -> RedisAdapter:
    adapter = RedisAdapter(namespace="streams", **kwargs)
    adapter._client = client
    return adapter


class TestRedisAdapter:
    async def test_get_unpickles_namespaced_key(self) -> None:
        client = AsyncMock()
        client.get = AsyncMock(return_value=pickle.dumps({"a": 1}))

        value = await _adapter(client).get("fp")

        assert value == {"a": 1}
        client.get.assert_awaited_once_with("streamsnare:streams:fp")

    async def test_get_error_degrades_to_miss(self) -> None:
        client = AsyncMock()
        client.get = AsyncMock(side_effect=RedisError("down"))
        assert await _adapter(client).get("fp") is None

    async def test_set_uses_setex_with_default_ttl(self) -> None:
        client = AsyncMock()
        await _adapter(client, ttl_seconds=120).set("fp", "v")

        key, ttl, packed = client.setex.call_args[0]
        assert key == "streamsnare:streams:fp"
        assert ttl == 120
        assert pickle.loads(packed) == "v"

    async def test_set_without_ttl(self) -> None:
        client = AsyncMock()
        await _adapter(client).set("fp", "v", ttl=0)

        client.setex.assert_not_called()
        client.set.assert_awaited_once()

    async def test_clear_only_touches_own_namespace(self) -> None:
        client = AsyncMock()
        seen: dict[str, str] = {}

        async def _scan(match: str):
            seen["match"] = match
            for key in (b"streamsnare:streams:a", b"streamsnare:streams:b"):
                yield key

        client.scan_iter = MagicMock(side_effect=_scan)
        client.delete = AsyncMock(return_value=1)

        await _adapter(client).clear()

        assert seen["match"] == "streamsnare:streams:*"
        assert client.delete.await_count == 2

    async def test_uninitialized_get_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not initialized"):
            await RedisAdapter().get("fp")

    async def test_aclose_releases_client(self) -> None:
        client = AsyncMock()
        adapter = _adapter(client)
        await adapter.aclose()
        client.aclose.assert_awaited_once()
        assert adapter._client is None
