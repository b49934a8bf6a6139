"""Browser Session Port - narrow interface over a headless browser page."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from streamsnare.domain.entities.provider import HttpContext


@dataclass(frozen=True)
class ResponseObservation:
    """One network response seen by a session."""

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def content_type(self) -> str:
        return (self.header("content-type") or "").lower()

    @property
    def content_length(self) -> int | None:
        raw = self.header("content-length")
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None


@dataclass(frozen=True)
class RequestObservation:
    """One outgoing request seen by a session."""

    url: str
    resource_type: str


ResponseHandler = Callable[[ResponseObservation], None]
RequestHandler = Callable[[RequestObservation], None]


@runtime_checkable
class BrowserSessionPort(Protocol):
    """One browser page with a fixed identity.

    Implementations:
      - PlaywrightBrowserSession (Chromium via playwright)

    Navigation failures are reported as ``NavigationTimeout`` or
    ``NavigationError``; handlers registered before ``navigate()`` see
    every response of the page load.
    """

    @property
    def url(self) -> str:
        """URL of the page after the last navigation."""
        ...

    async def navigate(
        self, url: str, *, timeout_ms: int, wait_for_idle: bool = False
    ) -> None:
        """Load ``url``; with ``wait_for_idle`` also wait (best-effort) for network idle."""
        ...

    def on_response(self, handler: ResponseHandler) -> None: ...

    def on_request(self, handler: RequestHandler) -> None: ...

    async def evaluate(self, script: str) -> Any: ...

    async def content(self) -> str:
        """Serialized DOM of the current page."""
        ...

    async def close(self) -> None: ...


@runtime_checkable
class BrowserSessionFactory(Protocol):
    """Opens scoped sessions; the session is closed on every exit path.

    Usage::

        async with factory.open(http_context) as session:
            await session.navigate(url, timeout_ms=15_000)
    """

    def open(
        self, context: HttpContext
    ) -> AbstractAsyncContextManager[BrowserSessionPort]: ...

    async def cleanup(self) -> None:
        """Release pooled resources (browser process) at shutdown."""
        ...


BrowserExecutableLocator = Callable[[], str]
"""Returns a native browser executable path or raises ``BrowserUnavailable``."""
