"""Shared Chromium process for all browser sessions.

One Chromium process serves every request; each session gets its own
``BrowserContext`` so cookies, storage and routes are never shared.

Concurrent ``warmup()`` calls are serialized by an asyncio lock: the
first caller launches Chromium, the others wait and receive the same
instance. A disconnected browser is relaunched on the next warmup.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog
from playwright.async_api import Browser, Error as PlaywrightError, Playwright, async_playwright

from streamsnare.domain.errors import BrowserUnavailable
from streamsnare.domain.ports.browser import BrowserExecutableLocator

log = structlog.get_logger(__name__)


class SharedBrowserPool:
    """Owns the single shared Chromium browser.

    Usage::

        pool = SharedBrowserPool(locator=make_locator(), headless=True)
        browser = await pool.warmup()
        ...
        await pool.cleanup()
    """

    def __init__(
        self,
        *,
        locator: BrowserExecutableLocator,
        headless: bool = True,
        launch_args: Sequence[str] = (),
    ) -> None:
        self._locator = locator
        self._headless = headless
        self._launch_args = list(launch_args)
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def warmup(self) -> Browser:
        """Ensure Chromium is running, launching it if needed.

        Raises:
            BrowserUnavailable: no executable found or the launch failed.
        """
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            # Stale state after a crash.
            if self._pw is not None:
                try:
                    await self._pw.stop()
                except Exception:  # noqa: BLE001
                    log.debug("shared_browser_stale_pw_stop_error", exc_info=True)
                self._pw = None
                self._browser = None

            executable = self._locator()
            self._pw = await async_playwright().start()
            try:
                self._browser = await self._pw.chromium.launch(
                    executable_path=executable,
                    headless=self._headless,
                    args=self._launch_args,
                )
            except PlaywrightError as exc:
                await self._pw.stop()
                self._pw = None
                log.error("shared_browser_launch_failed", executable=executable, error=str(exc))
                raise BrowserUnavailable(
                    f"Failed to launch browser at {executable}: {exc}",
                    details={"executable": executable},
                ) from exc

            log.info("shared_browser_launched", executable=executable, headless=self._headless)
            return self._browser

    async def cleanup(self) -> None:
        """Close the shared browser and Playwright instance."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception:  # noqa: BLE001
                log.warning("shared_browser_close_error", exc_info=True)
            self._browser = None
        if self._pw is not None:
            try:
                await self._pw.stop()
            except Exception:  # noqa: BLE001
                log.warning("shared_pw_stop_error", exc_info=True)
            self._pw = None
        log.info("shared_browser_cleaned_up")
