"""Tests for ResolveStreamUseCase."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from streamsnare.application.use_cases.resolve_stream import ResolveStreamUseCase
from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.streams import ResolvedStream
from streamsnare.domain.errors import (
    MissingField,
    StreamNotFound,
    UnknownProvider,
    UnsupportedCombination,
)
from streamsnare.infrastructure.cache.memory_adapter import MemoryLRUAdapter
from streamsnare.infrastructure.persistence import STREAM_CODEC, ResultCacheRepository
from streamsnare.infrastructure.providers import ProviderRegistry

_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_STREAM = ResolvedStream(
    url="https://cdn.test/master.m3u8",
    format="hls",
    expires_at=_NOW + timedelta(minutes=10),
)


class _Clock:
    def __init__(self) -> None:
        self.now = _NOW

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def resolver() -> AsyncMock:
    resolver = AsyncMock()
    resolver.run = AsyncMock(return_value=_STREAM)
    return resolver


@pytest.fixture()
def use_case(resolver: AsyncMock, clock: _Clock) -> ResolveStreamUseCase:
    repo = ResultCacheRepository(
        MemoryLRUAdapter(max_entries=10, ttl_seconds=0),
        STREAM_CODEC,
        ttl_seconds=420,
        clock=clock,
    )
    return ResolveStreamUseCase(
        ProviderRegistry(), resolver, repo, user_agent="TestAgent/1.0"
    )


class TestExecute:
    async def test_live_then_cached(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        request = MediaRequest.movie("786892")

        first = await use_case.execute("vidlink", request)
        assert first.from_cache is False
        assert first.cached_at is None
        assert first.value == _STREAM

        second = await use_case.execute("vidlink", request)
        assert second.from_cache is True
        assert second.cached_at == _NOW
        assert second.value == _STREAM

        resolver.run.assert_awaited_once()

    async def test_resolver_receives_upstream_url_and_context(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        await use_case.execute("vidlink", MediaRequest.tv("1399", "1", "2"))

        url, ctx = resolver.run.call_args.args
        assert url == "https://vidlink.pro/tv/1399/1/2?player=jw"
        assert ctx.referer == "https://vidlink.pro/"
        assert ctx.user_agent == "TestAgent/1.0"

    async def test_expired_entry_resolves_again(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock, clock: _Clock
    ) -> None:
        request = MediaRequest.movie("1")
        await use_case.execute("vidlink", request)

        clock.now = _NOW + timedelta(seconds=421)
        result = await use_case.execute("vidlink", request)

        assert result.from_cache is False
        assert resolver.run.await_count == 2

    async def test_distinct_requests_do_not_share_cache(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        await use_case.execute("vidlink", MediaRequest.movie("1"))
        result = await use_case.execute("vidlink", MediaRequest.movie("2"))
        assert result.from_cache is False
        assert resolver.run.await_count == 2

    async def test_unsupported_kind_fails_before_resolution(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        with pytest.raises(UnsupportedCombination):
            await use_case.execute("filmex", MediaRequest.anime("5114", "1", "sub"))
        resolver.run.assert_not_awaited()

    async def test_invalid_request_fails_before_resolution(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        with pytest.raises(MissingField):
            await use_case.execute("vidlink", MediaRequest(kind="tv", tmdb_id="1"))
        resolver.run.assert_not_awaited()

    async def test_unknown_provider(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        with pytest.raises(UnknownProvider):
            await use_case.execute("nope", MediaRequest.movie("1"))
        resolver.run.assert_not_awaited()

    async def test_failures_are_not_cached(
        self, use_case: ResolveStreamUseCase, resolver: AsyncMock
    ) -> None:
        resolver.run.side_effect = [StreamNotFound("none"), _STREAM]
        request = MediaRequest.movie("1")

        with pytest.raises(StreamNotFound):
            await use_case.execute("vidlink", request)

        result = await use_case.execute("vidlink", request)
        assert result.from_cache is False
        assert result.value == _STREAM
