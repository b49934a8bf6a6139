"""Category and event discovery on sports listing sites.

Parsing is pure (``parse_categories``/``parse_events`` over HTML);
``SportsExtractor`` only adds the browser round-trip.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

import structlog
from bs4 import Tag

from streamsnare.domain.entities.provider import Provider, SportsHeuristics
from streamsnare.domain.entities.sports import Category, Event, EventLink
from streamsnare.domain.ports.browser import BrowserSessionFactory
from streamsnare.infrastructure.common.html_selectors import (
    absolute_url,
    attr_of,
    first_text,
    parse_html,
    safe_select,
    select_each,
    text_of,
)

log = structlog.get_logger(__name__)

CATEGORY_NAME_MAX = 50
EVENT_TITLE_BOUNDS = (5, 200)
FALLBACK_EVENT_TEXT_BOUNDS = (10, 100)
DEFAULT_SLUG = "general"


def slug_of(url: str) -> str:
    """Last non-empty path segment of ``url`` (``general`` if none)."""
    segments = [s for s in urlsplit(url).path.split("/") if s]
    return segments[-1] if segments else DEFAULT_SLUG


def _excluded(text: str, words: Iterable[str]) -> bool:
    return any(word in text for word in words)


def _href_of(element: Tag, base_url: str) -> str:
    href = attr_of(element, "href")
    if not href and element.name != "a":
        inner = element.select_one("a[href]")
        href = attr_of(inner, "href") if inner is not None else ""
    return absolute_url(base_url, href)


def _is_sports(name: str, slug: str, keywords: Iterable[str]) -> bool:
    keywords = tuple(keywords)
    if not keywords:
        return True
    haystack = f"{name} {slug}".lower()
    return any(k in haystack for k in keywords)


def parse_categories(html: str, base_url: str, heuristics: SportsHeuristics) -> list[Category]:
    """Categories in selector-chain order, deduplicated by URL.

    Falls back to scanning every link for a sports keyword when the
    selector chain yields nothing.
    """
    soup = parse_html(html)
    found: dict[str, Category] = {}

    for _, element in select_each(soup, heuristics.category_selectors):
        name = text_of(element)
        url = _href_of(element, base_url)
        if not name or not url or heuristics.host not in url:
            continue
        if _excluded(name, heuristics.category_exclude) or not 1 < len(name) < CATEGORY_NAME_MAX:
            continue
        slug = slug_of(url)
        if not _is_sports(name, slug, heuristics.category_keywords):
            continue
        found.setdefault(url, Category(name=name, slug=slug, url=url))

    if not found:
        for element in safe_select(soup, "a[href]"):
            name = text_of(element)
            url = _href_of(element, base_url)
            if not name or not url or heuristics.host not in url:
                continue
            if _excluded(name, heuristics.category_exclude) or not 2 < len(name) < CATEGORY_NAME_MAX:
                continue
            if not any(k in name.lower() for k in heuristics.category_keywords):
                continue
            found.setdefault(url, Category(name=name, slug=slug_of(url), url=url))

    return list(found.values())


def _event_links(element: Tag, base_url: str, heuristics: SportsHeuristics) -> tuple[EventLink, ...]:
    links: dict[str, EventLink] = {}
    for sel in heuristics.link_selectors:
        for index, link in enumerate(safe_select(element, sel)):
            url = absolute_url(base_url, attr_of(link, "href", "data-url"))
            if not url or heuristics.host not in url:
                continue
            links.setdefault(url, EventLink(name=text_of(link) or f"Link {index + 1}", url=url))
    return tuple(links.values())


def parse_events(html: str, base_url: str, heuristics: SportsHeuristics) -> list[Event]:
    """Events in selector-chain order, deduplicated by URL.

    Falls back to links whose text mentions ``vs``/``live``/``watch``/...
    when the selector chain yields nothing.
    """
    soup = parse_html(html)
    found: dict[str, Event] = {}
    low, high = EVENT_TITLE_BOUNDS

    for _, element in select_each(soup, heuristics.event_selectors):
        title = (
            first_text(element, heuristics.event_title_selectors)
            or text_of(element)
            or attr_of(element, "title")
        )
        url = _href_of(element, base_url)
        if not title or not url or heuristics.host not in url:
            continue
        if not low < len(title) < high or _excluded(title, heuristics.event_exclude):
            continue
        if url not in found:
            found[url] = Event(
                title=title,
                url=url,
                candidate_links=_event_links(element, base_url, heuristics),
            )

    if not found:
        low, high = FALLBACK_EVENT_TEXT_BOUNDS
        for element in safe_select(soup, "a[href]"):
            text = text_of(element)
            url = _href_of(element, base_url)
            if not text or not url or heuristics.host not in url:
                continue
            lowered = text.lower()
            if not any(k in lowered for k in heuristics.event_fallback_keywords):
                continue
            if low < len(text) < high:
                found.setdefault(url, Event(title=text, url=url))

    return list(found.values())


class SportsExtractor:
    """Loads listing pages in a browser session and parses them."""

    def __init__(
        self,
        factory: BrowserSessionFactory,
        *,
        navigation_timeout_ms: int = 15_000,
        user_agent: str | None = None,
    ) -> None:
        self._factory = factory
        self._timeout_ms = navigation_timeout_ms
        self._user_agent = user_agent

    async def _load(self, provider: Provider, url: str) -> tuple[str, str]:
        async with self._factory.open(provider.http_context(self._user_agent)) as session:
            await session.navigate(url, timeout_ms=self._timeout_ms, wait_for_idle=True)
            return await session.content(), (session.url or url)

    @staticmethod
    def _heuristics(provider: Provider) -> SportsHeuristics:
        if provider.heuristics is None:
            raise ValueError(f"Provider {provider.id!r} has no sports heuristics")
        return provider.heuristics

    async def list_categories(self, provider: Provider) -> list[Category]:
        heuristics = self._heuristics(provider)
        html, page_url = await self._load(provider, provider.home_url)
        categories = parse_categories(html, page_url, heuristics)
        log.info("categories_listed", provider=provider.id, count=len(categories))
        return categories

    async def list_events(self, provider: Provider, category_url: str) -> list[Event]:
        heuristics = self._heuristics(provider)
        html, page_url = await self._load(provider, category_url)
        events = parse_events(html, page_url, heuristics)
        log.info("events_listed", provider=provider.id, category_url=category_url, count=len(events))
        return events
