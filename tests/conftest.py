"""Shared test fixtures for the Streamsnare test suite."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock

import pytest

from streamsnare.domain.entities.provider import HttpContext
from streamsnare.domain.ports.browser import (
    RequestObservation,
    ResponseHandler,
    ResponseObservation,
)
from streamsnare.infrastructure.resolution import player_probe

# ---------------------------------------------------------------------------
# Scripted browser
# ---------------------------------------------------------------------------


@dataclass
class FakePage:
    """What a scripted URL does when a FakeSession navigates to it."""

    html: str = ""
    responses: list[ResponseObservation] = field(default_factory=list)
    player_url: Any = None
    players: Any = field(default_factory=list)
    error: Exception | None = None
    evaluate_error: Exception | None = None
    final_url: str | None = None
    delay: float = 0.0


class FakeSession:
    """In-memory BrowserSessionPort driven by a URL -> FakePage map."""

    def __init__(self, pages: dict[str, FakePage], context: HttpContext) -> None:
        self._pages = pages
        self.context = context
        self.navigations: list[str] = []
        self.closed = False
        self._url = ""
        self._page = FakePage()
        self._response_handlers: list[ResponseHandler] = []
        self._request_handlers: list[Any] = []

    @property
    def url(self) -> str:
        return self._url

    async def navigate(
        self, url: str, *, timeout_ms: int, wait_for_idle: bool = False
    ) -> None:
        self.navigations.append(url)
        page = self._pages.get(url, FakePage())
        if page.delay:
            await asyncio.sleep(page.delay)
        if page.error is not None:
            raise page.error
        self._page = page
        self._url = page.final_url or url
        for handler in self._request_handlers:
            handler(RequestObservation(url=url, resource_type="document"))
        for response in page.responses:
            for handler in self._response_handlers:
                handler(response)

    def on_response(self, handler: ResponseHandler) -> None:
        self._response_handlers.append(handler)

    def on_request(self, handler: Any) -> None:
        self._request_handlers.append(handler)

    async def evaluate(self, script: str) -> Any:
        if self._page.evaluate_error is not None:
            raise self._page.evaluate_error
        if script == player_probe.SINGLE_PLAYER_SCRIPT:
            return self._page.player_url
        if script == player_probe.MULTI_PLAYER_SCRIPT:
            return self._page.players
        return None

    async def content(self) -> str:
        return self._page.html

    async def close(self) -> None:
        self.closed = True


class FakeSessionFactory:
    """BrowserSessionFactory that records every session it hands out."""

    def __init__(self, pages: dict[str, FakePage] | None = None) -> None:
        self.pages: dict[str, FakePage] = dict(pages or {})
        self.sessions: list[FakeSession] = []
        self.cleaned_up = False

    @asynccontextmanager
    async def open(self, context: HttpContext) -> AsyncIterator[FakeSession]:
        session = FakeSession(self.pages, context)
        self.sessions.append(session)
        try:
            yield session
        finally:
            await session.close()

    async def cleanup(self) -> None:
        self.cleaned_up = True

    @property
    def navigations(self) -> list[str]:
        return [url for session in self.sessions for url in session.navigations]


@pytest.fixture()
def make_page() -> type[FakePage]:
    """The FakePage class, for scripting URLs in tests."""
    return FakePage


@pytest.fixture()
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture()
def http_context() -> HttpContext:
    return HttpContext(referer="https://vidlink.pro/", origin="https://vidlink.pro")


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    cache.clear = AsyncMock()
    cache.aclose = AsyncMock()
    return cache
