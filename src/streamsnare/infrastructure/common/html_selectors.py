"""CSS-selector helpers over BeautifulSoup with fallback chains.

Selectors come from provider heuristics (data, not code), so a selector
the parser rejects is skipped instead of aborting the whole chain.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urljoin, urlsplit

import structlog
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

log = structlog.get_logger(__name__)


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string with the ``lxml`` parser."""
    return BeautifulSoup(html, "lxml")


def safe_select(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """``root.select(selector)``; an invalid selector yields no matches."""
    try:
        return root.select(selector)
    except SelectorSyntaxError:
        log.debug("html_selector_invalid", selector=selector)
        return []


def select_each(root: BeautifulSoup | Tag, selectors: Iterable[str]) -> Iterable[tuple[str, Tag]]:
    """Yield ``(selector, element)`` for every match of every selector, in order."""
    for sel in selectors:
        for element in safe_select(root, sel):
            yield sel, element


def text_of(element: Tag) -> str:
    """Element text with internal whitespace collapsed."""
    return " ".join(element.get_text(" ", strip=True).split())


def first_text(element: Tag, selectors: Iterable[str]) -> str:
    """Text of the first child matching any of ``selectors`` (in order)."""
    for sel in selectors:
        for match in safe_select(element, sel):
            text = text_of(match)
            if text:
                return text
    return ""


def attr_of(element: Tag, *names: str) -> str:
    """First non-empty attribute among ``names``."""
    for name in names:
        value = element.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return str(value).strip()
    return ""


def absolute_url(base_url: str, href: str) -> str:
    """Resolve ``href`` against ``base_url``; empty for non-http(s) targets."""
    if not href or href.startswith(("javascript:", "mailto:", "#", "data:")):
        return ""
    url = urljoin(base_url, href)
    if urlsplit(url).scheme not in ("http", "https"):
        return ""
    return url
