"""Integration tests: ResultCacheRepository on a real SQLite-backed diskcache."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from streamsnare.domain.entities.streams import ResolvedStream
from streamsnare.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from streamsnare.infrastructure.persistence.result_cache import STREAM_CODEC, ResultCacheRepository

pytestmark = pytest.mark.integration

_T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _stream() -> ResolvedStream:
    return ResolvedStream(
        url="https://cdn.test/master.m3u8",
        format="hls",
        expires_at=_T0 + timedelta(minutes=10),
    )


class TestDiskcacheResultCache:
    async def test_entry_survives_reopen(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path, namespace="streams") as cache:
            repo = ResultCacheRepository(cache, STREAM_CODEC, ttl_seconds=3600, clock=lambda: _T0)
            await repo.put("fp1", _stream())

        async with DiskcacheAdapter(tmp_path, namespace="streams") as cache:
            repo = ResultCacheRepository(cache, STREAM_CODEC, ttl_seconds=3600, clock=lambda: _T0)
            entry = await repo.get("fp1")

        assert entry is not None
        assert entry.value == _stream()
        assert entry.cached_at == _T0

    async def test_namespaces_are_isolated(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path, namespace="streams") as streams, DiskcacheAdapter(
            tmp_path, namespace="events"
        ) as events:
            await streams.set("k", "stream")
            await events.set("k", "event")
            await events.clear()

            assert await streams.get("k") == "stream"
            assert await events.get("k") is None

    async def test_logically_expired_entry_removed(self, diskcache: DiskcacheAdapter) -> None:
        now = {"t": _T0}
        repo = ResultCacheRepository(diskcache, STREAM_CODEC, ttl_seconds=30, clock=lambda: now["t"])
        await repo.put("fp1", _stream())

        now["t"] = _T0 + timedelta(seconds=31)

        assert await repo.get("fp1") is None
        assert not await diskcache.exists("fp1")

    async def test_entry_count_is_bounded(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path, namespace="events", max_entries=3) as cache:
            for i in range(5):
                await cache.set(f"k{i}", i)

            assert [await cache.exists(f"k{i}") for i in range(5)] == [
                False,
                False,
                True,
                True,
                True,
            ]
            assert await cache.get("k4") == 4

    async def test_overwrite_does_not_evict(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path, namespace="events", max_entries=2) as cache:
            await cache.set("a", 1)
            await cache.set("b", 2)
            await cache.set("a", 3)

            assert await cache.get("a") == 3
            assert await cache.get("b") == 2

    async def test_adapter_requires_open(self, tmp_path: Path) -> None:
        adapter = DiskcacheAdapter(tmp_path)
        with pytest.raises(RuntimeError, match="not initialized"):
            await adapter.get("k")
        assert await adapter.exists("k") is False
