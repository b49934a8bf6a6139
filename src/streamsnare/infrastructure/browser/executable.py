"""Locate a native Chrome/Chromium binary for Playwright to drive."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

import structlog

from streamsnare.domain.errors import BrowserUnavailable

log = structlog.get_logger(__name__)

ENV_VARS: tuple[str, ...] = ("CHROME_EXECUTABLE", "CHROME_PATH")

_MAC_PATHS: tuple[str, ...] = (
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
)

_LINUX_PATHS: tuple[str, ...] = (
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
)


def _windows_paths(env: Mapping[str, str]) -> tuple[str, ...]:
    local = env.get("LOCALAPPDATA", "")
    paths = [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ]
    if local:
        paths.append(os.path.join(local, r"Google\Chrome\Application\chrome.exe"))
    return tuple(paths)


def browser_executable_candidates(
    override: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> list[str]:
    """Candidate paths in priority order (not yet checked for existence).

    Order: explicit override, CHROME_EXECUTABLE, CHROME_PATH, then the
    platform's usual install locations.
    """
    env = os.environ if env is None else env
    platform = sys.platform if platform is None else platform

    candidates: list[str] = []
    if override:
        candidates.append(str(override))
    candidates.extend(env[name] for name in ENV_VARS if env.get(name))

    if platform.startswith("win"):
        candidates.extend(_windows_paths(env))
    elif platform == "darwin":
        candidates.extend(_MAC_PATHS)
    else:
        candidates.extend(_LINUX_PATHS)
    return candidates


def locate_browser_executable(
    override: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
    exists: Callable[[str], bool] = os.path.exists,
) -> str:
    """Return the first existing browser executable.

    Raises:
        BrowserUnavailable: if no candidate exists on disk.
    """
    candidates = browser_executable_candidates(override, env=env, platform=platform)
    for candidate in candidates:
        if exists(candidate):
            log.debug("browser_executable_found", path=candidate)
            return candidate

    raise BrowserUnavailable(
        "No Chrome executable found. Set CHROME_EXECUTABLE or CHROME_PATH "
        "to a valid Chrome/Chromium binary.",
        details={"searched": candidates},
    )


def make_locator(override: str | Path | None = None) -> Callable[[], str]:
    """Bind an optional config override into a zero-arg locator."""

    def _locate() -> str:
        return locate_browser_executable(override)

    return _locate
