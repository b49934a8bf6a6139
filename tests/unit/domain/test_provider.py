"""Tests for Provider and HttpContext."""

from __future__ import annotations

import pytest

from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.provider import DEFAULT_USER_AGENT, HttpContext, Provider
from streamsnare.domain.errors import MissingField, UnsupportedCombination


def _provider(build_calls: list[MediaRequest]) -> Provider:
    def _build(request: MediaRequest) -> str:
        build_calls.append(request)
        return f"https://example.test/movie/{request.tmdb_id}"

    return Provider(
        id="example",
        kind="media",
        referer="https://example.test/",
        origin="https://example.test",
        supports=frozenset({"movie"}),
        build_url=_build,
    )


class TestHttpContext:
    def test_headers_include_referer_and_origin(self) -> None:
        ctx = HttpContext(referer="https://a.test/", origin="https://a.test")
        assert ctx.headers() == {"Referer": "https://a.test/", "Origin": "https://a.test"}

    def test_empty_values_are_omitted(self) -> None:
        assert HttpContext(referer="", origin="").headers() == {}

    def test_default_user_agent(self) -> None:
        assert HttpContext("r", "o").user_agent == DEFAULT_USER_AGENT


class TestProvider:
    def test_http_context_uses_override_user_agent(self) -> None:
        provider = _provider([])
        ctx = provider.http_context("TestAgent/1.0")
        assert ctx.user_agent == "TestAgent/1.0"
        assert ctx.referer == "https://example.test/"

    def test_upstream_url_builds_for_supported_kind(self) -> None:
        calls: list[MediaRequest] = []
        provider = _provider(calls)
        assert provider.upstream_url(MediaRequest.movie("7")) == "https://example.test/movie/7"
        assert len(calls) == 1

    def test_unsupported_kind_never_reaches_builder(self) -> None:
        calls: list[MediaRequest] = []
        provider = _provider(calls)
        with pytest.raises(UnsupportedCombination):
            provider.upstream_url(MediaRequest.tv("1", "1", "1"))
        assert calls == []

    def test_invalid_request_is_rejected_before_support_check(self) -> None:
        provider = _provider([])
        with pytest.raises(MissingField):
            provider.upstream_url(MediaRequest(kind="anime", mal_id="1"))
