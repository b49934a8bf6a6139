"""Sports listing and event stream use cases.

provider id -> categories -> events -> stream candidates, every step
cached under its own fingerprint and TTL.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import urlsplit

import structlog

from streamsnare.application.fingerprint import fingerprint
from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.provider import (
    HttpContext,
    Provider,
    ProviderKind,
    SportsHeuristics,
)
from streamsnare.domain.entities.sports import (
    Category,
    CategoryEvents,
    Event,
    EventStreams,
)
from streamsnare.domain.entities.streams import CachedResult, StreamCandidate
from streamsnare.domain.errors import BrowserUnavailable, MissingField
from streamsnare.domain.ports.result_cache import ResultCachePort

log = structlog.get_logger(__name__)


class _ProviderLookup(Protocol):
    def get(self, provider_id: str, *, kind: ProviderKind | None = None) -> Provider: ...


class _ListingExtractor(Protocol):
    """Loads and parses provider listing pages."""

    async def list_categories(self, provider: Provider) -> list[Category]: ...

    async def list_events(self, provider: Provider, category_url: str) -> list[Event]: ...


class _EventStreamResolver(Protocol):
    """Collects every stream candidate reachable from an event page."""

    async def run(
        self,
        event_url: str,
        http_context: HttpContext,
        heuristics: SportsHeuristics | None = None,
    ) -> tuple[StreamCandidate, ...]: ...


def _is_absolute_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class SportsUseCase:
    """Category, event and stream extraction for sports providers.

    ``list_all_sports_data`` crawls serially and records failures per
    category and per event instead of aborting the whole crawl.
    """

    def __init__(
        self,
        providers: _ProviderLookup,
        extractor: _ListingExtractor,
        resolver: _EventStreamResolver,
        *,
        categories_cache: ResultCachePort[tuple[Category, ...]],
        events_cache: ResultCachePort[tuple[Event, ...]],
        streams_cache: ResultCachePort[tuple[StreamCandidate, ...]],
        all_cache: ResultCachePort[tuple[CategoryEvents, ...]],
        user_agent: str | None = None,
    ) -> None:
        self._providers = providers
        self._extractor = extractor
        self._resolver = resolver
        self._categories_cache = categories_cache
        self._events_cache = events_cache
        self._streams_cache = streams_cache
        self._all_cache = all_cache
        self._user_agent = user_agent

    def _provider(self, provider_id: str) -> Provider:
        return self._providers.get(provider_id, kind="sports")

    async def list_categories(
        self, provider_id: str
    ) -> CachedResult[tuple[Category, ...]]:
        provider = self._provider(provider_id)
        key = fingerprint("categories", provider.id)

        cached = await self._categories_cache.get(key)
        if cached is not None:
            return CachedResult(cached.value, from_cache=True, cached_at=cached.cached_at)

        categories = tuple(await self._extractor.list_categories(provider))
        await self._categories_cache.put(key, categories)
        return CachedResult(categories)

    async def _category_url(self, provider: Provider, slug_or_url: str) -> str:
        value = (slug_or_url or "").strip()
        if not value:
            raise MissingField(["category"])
        if _is_absolute_url(value):
            return value

        listing = await self.list_categories(provider.id)
        for category in listing.value:
            if category.slug == value:
                return category.url
        raise MissingField(
            ["category"],
            message=f"Unknown category {value!r} for provider {provider.id!r}.",
        )

    async def list_events(
        self, provider_id: str, category_slug_or_url: str
    ) -> CachedResult[tuple[Event, ...]]:
        """Events of one category, addressed by slug or absolute URL.

        Raises:
            MissingField: empty input or a slug not in the category listing.
        """
        provider = self._provider(provider_id)
        category_url = await self._category_url(provider, category_slug_or_url)
        key = fingerprint("events", provider.id, category_url=category_url)

        cached = await self._events_cache.get(key)
        if cached is not None:
            return CachedResult(cached.value, from_cache=True, cached_at=cached.cached_at)

        events = tuple(await self._extractor.list_events(provider, category_url))
        await self._events_cache.put(key, events)
        return CachedResult(events)

    async def extract_event_streams(
        self, provider_id: str, event_url: str
    ) -> CachedResult[tuple[StreamCandidate, ...]]:
        provider = self._provider(provider_id)
        request = MediaRequest.sports_event(event_url)
        url = provider.upstream_url(request)
        key = fingerprint("event-streams", provider.id, event_url=url)

        cached = await self._streams_cache.get(key)
        if cached is not None:
            return CachedResult(cached.value, from_cache=True, cached_at=cached.cached_at)

        candidates = await self._resolver.run(
            url, provider.http_context(self._user_agent), provider.heuristics
        )
        await self._streams_cache.put(key, candidates)
        return CachedResult(candidates)

    async def _crawl_category(self, provider: Provider, category: Category) -> CategoryEvents:
        try:
            events = (await self.list_events(provider.id, category.url)).value
        except BrowserUnavailable:
            raise
        except Exception as exc:
            log.warning(
                "category_crawl_failed",
                provider=provider.id,
                category_url=category.url,
                error=str(exc),
                exc_info=True,
            )
            return CategoryEvents(category, error=str(exc))

        rows: list[EventStreams] = []
        for event in events:
            try:
                streams = (await self.extract_event_streams(provider.id, event.url)).value
            except BrowserUnavailable:
                raise
            except Exception as exc:
                log.warning(
                    "event_crawl_failed",
                    provider=provider.id,
                    event_url=event.url,
                    error=str(exc),
                    exc_info=True,
                )
                rows.append(EventStreams(event, error=str(exc)))
                continue
            rows.append(EventStreams(event, streams))
        return CategoryEvents(category, tuple(rows))

    async def list_all_sports_data(
        self, provider_id: str
    ) -> CachedResult[tuple[CategoryEvents, ...]]:
        """Full crawl: every category with its events and their streams.

        Only a failure to load the category listing itself is raised.
        """
        provider = self._provider(provider_id)
        key = fingerprint("sports-all", provider.id)

        cached = await self._all_cache.get(key)
        if cached is not None:
            return CachedResult(cached.value, from_cache=True, cached_at=cached.cached_at)

        categories = (await self.list_categories(provider.id)).value
        results = tuple(
            [await self._crawl_category(provider, category) for category in categories]
        )
        await self._all_cache.put(key, results)

        log.info(
            "sports_crawl_completed",
            provider=provider.id,
            categories=len(results),
            events=sum(len(row.events) for row in results),
            failed_categories=sum(1 for row in results if row.error),
        )
        return CachedResult(results)
