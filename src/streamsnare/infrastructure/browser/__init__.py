from .executable import browser_executable_candidates, locate_browser_executable, make_locator
from .session import PlaywrightBrowserSession, PlaywrightSessionFactory
from .shared_browser import SharedBrowserPool

__all__ = [
    "PlaywrightBrowserSession",
    "PlaywrightSessionFactory",
    "SharedBrowserPool",
    "browser_executable_candidates",
    "locate_browser_executable",
    "make_locator",
]
