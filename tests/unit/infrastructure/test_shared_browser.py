"""Tests for SharedBrowserPool with a patched Playwright driver."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from streamsnare.domain.errors import BrowserUnavailable
from streamsnare.infrastructure.browser import shared_browser
from streamsnare.infrastructure.browser.shared_browser import SharedBrowserPool


@pytest.fixture()
def playwright_driver(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    browser = MagicMock()
    browser.is_connected = MagicMock(return_value=True)
    browser.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    pw.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    monkeypatch.setattr(shared_browser, "async_playwright", MagicMock(return_value=starter))
    return pw


class TestSharedBrowserPool:
    async def test_concurrent_warmups_launch_once(self, playwright_driver: MagicMock) -> None:
        pool = SharedBrowserPool(locator=lambda: "/usr/bin/chromium", launch_args=["--no-sandbox"])

        first, second = await asyncio.gather(pool.warmup(), pool.warmup())

        assert first is second
        assert pool.is_running
        playwright_driver.chromium.launch.assert_awaited_once_with(
            executable_path="/usr/bin/chromium",
            headless=True,
            args=["--no-sandbox"],
        )

    async def test_missing_executable_never_starts_playwright(
        self, playwright_driver: MagicMock
    ) -> None:
        def _locator() -> str:
            raise BrowserUnavailable("No Chrome executable found.")

        pool = SharedBrowserPool(locator=_locator)

        with pytest.raises(BrowserUnavailable):
            await pool.warmup()
        playwright_driver.chromium.launch.assert_not_awaited()
        assert not pool.is_running

    async def test_launch_failure_becomes_browser_unavailable(
        self, playwright_driver: MagicMock
    ) -> None:
        playwright_driver.chromium.launch = AsyncMock(side_effect=PlaywrightError("bad binary"))
        pool = SharedBrowserPool(locator=lambda: "/opt/broken")

        with pytest.raises(BrowserUnavailable) as exc:
            await pool.warmup()

        assert exc.value.details == {"executable": "/opt/broken"}
        playwright_driver.stop.assert_awaited_once()

    async def test_disconnected_browser_is_relaunched(self, playwright_driver: MagicMock) -> None:
        pool = SharedBrowserPool(locator=lambda: "/usr/bin/chromium")
        browser = await pool.warmup()
        browser.is_connected.return_value = False

        await pool.warmup()

        assert playwright_driver.chromium.launch.await_count == 2

    async def test_cleanup(self, playwright_driver: MagicMock) -> None:
        pool = SharedBrowserPool(locator=lambda: "/usr/bin/chromium")
        browser = await pool.warmup()

        await pool.cleanup()

        browser.close.assert_awaited_once()
        playwright_driver.stop.assert_awaited_once()
        assert not pool.is_running
