"""Playwright-backed browser sessions.

Each session is a fresh ``BrowserContext`` + page on the shared Chromium
process, with a fixed user agent, ``Referer``/``Origin`` headers and a
route handler that drops heavy resource types.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from playwright.async_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Request,
    Response,
    Route,
    TimeoutError as PlaywrightTimeoutError,
)

from streamsnare.domain.entities.provider import HttpContext
from streamsnare.domain.errors import NavigationError, NavigationTimeout
from streamsnare.domain.ports.browser import (
    RequestHandler,
    RequestObservation,
    ResponseHandler,
    ResponseObservation,
)

from .shared_browser import SharedBrowserPool

log = structlog.get_logger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "other"})

_IDLE_TIMEOUT_MS = 5_000


async def _block_resources(route: Route) -> None:
    """Abort requests for heavy resource types."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class PlaywrightBrowserSession:
    """BrowserSessionPort over one Playwright page."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context = context
        self._page = page
        self._closed = False

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(
        self, url: str, *, timeout_ms: int, wait_for_idle: bool = False
    ) -> None:
        try:
            resp = await self._page.goto(
                url, wait_until="domcontentloaded", timeout=timeout_ms
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeout(
                f"Timed out after {timeout_ms} ms loading {url}",
                details={"url": url, "timeout_ms": timeout_ms},
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(
                f"Failed to load {url}: {exc.message}",
                details={"url": url},
            ) from exc

        if resp is not None and resp.status >= 400:
            raise NavigationError(
                f"Upstream answered {resp.status} for {url}",
                details={"url": url, "status": resp.status},
            )

        if wait_for_idle:
            try:
                await self._page.wait_for_load_state(
                    "networkidle", timeout=min(timeout_ms, _IDLE_TIMEOUT_MS)
                )
            except PlaywrightError:
                log.debug("network_idle_not_reached", url=url)

    def on_response(self, handler: ResponseHandler) -> None:
        def _forward(response: Response) -> None:
            try:
                handler(
                    ResponseObservation(
                        url=response.url,
                        status=response.status,
                        headers=response.headers,
                    )
                )
            except Exception:  # noqa: BLE001
                log.debug("response_handler_error", url=response.url, exc_info=True)

        self._page.on("response", _forward)

    def on_request(self, handler: RequestHandler) -> None:
        def _forward(request: Request) -> None:
            try:
                handler(RequestObservation(url=request.url, resource_type=request.resource_type))
            except Exception:  # noqa: BLE001
                log.debug("request_handler_error", url=request.url, exc_info=True)

        self._page.on("request", _forward)

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def content(self) -> str:
        return await self._page.content()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._context.close()
        except PlaywrightError:
            log.debug("browser_context_close_error", exc_info=True)


class PlaywrightSessionFactory:
    """Opens isolated sessions on a SharedBrowserPool.

    Checkout is a context creation, checkin is the context close; both
    happen inside ``open()`` so a session never outlives its ``async with``.
    """

    def __init__(
        self,
        pool: SharedBrowserPool,
        *,
        stealth: bool = False,
        viewport: dict[str, int] | None = None,
    ) -> None:
        self._pool = pool
        self._stealth = stealth
        self._viewport = viewport or {"width": 1280, "height": 720}

    @asynccontextmanager
    async def open(self, context: HttpContext) -> AsyncIterator[PlaywrightBrowserSession]:
        browser = await self._pool.warmup()
        ctx = await browser.new_context(
            user_agent=context.user_agent,
            extra_http_headers=context.headers(),
            viewport=self._viewport,
        )
        session: PlaywrightBrowserSession | None = None
        try:
            if self._stealth:
                from playwright_stealth import Stealth

                await Stealth().apply_stealth_async(ctx)
            await ctx.route("**/*", _block_resources)
            session = PlaywrightBrowserSession(ctx, await ctx.new_page())
            log.debug("browser_session_opened", referer=context.referer)
            yield session
        finally:
            if session is not None:
                await session.close()
            else:
                await ctx.close()
            log.debug("browser_session_closed", referer=context.referer)

    async def cleanup(self) -> None:
        await self._pool.cleanup()
