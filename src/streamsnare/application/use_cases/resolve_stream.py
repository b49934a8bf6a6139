"""Single-stream resolution use case.

provider id + MediaRequest -> upstream URL -> cache lookup
-> browser resolution -> cache store.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from streamsnare.application.fingerprint import request_fingerprint
from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.provider import HttpContext, Provider, ProviderKind
from streamsnare.domain.entities.streams import CachedResult, ResolvedStream
from streamsnare.domain.ports.result_cache import ResultCachePort

log = structlog.get_logger(__name__)


class _ProviderLookup(Protocol):
    """Resolves provider ids to immutable Provider definitions."""

    def get(self, provider_id: str, *, kind: ProviderKind | None = None) -> Provider: ...


class _StreamResolver(Protocol):
    """Drives one browser session until a playable stream is found."""

    async def run(self, url: str, http_context: HttpContext) -> ResolvedStream: ...


class ResolveStreamUseCase:
    """Resolve a provider + MediaRequest to a playable stream URL.

    Validation and provider support checks run before the cache or the
    browser is touched, so invalid requests never open a session.
    """

    def __init__(
        self,
        providers: _ProviderLookup,
        resolver: _StreamResolver,
        cache: ResultCachePort[ResolvedStream],
        *,
        user_agent: str | None = None,
    ) -> None:
        self._providers = providers
        self._resolver = resolver
        self._cache = cache
        self._user_agent = user_agent

    async def execute(
        self, provider_id: str, request: MediaRequest
    ) -> CachedResult[ResolvedStream]:
        """Return the stream for ``request``, from cache when still fresh.

        Raises:
            UnknownProvider, MissingField, UnsupportedCombination: invalid request.
            NavigationTimeout, NavigationError, StreamNotFound: upstream failure.
            BrowserUnavailable: no usable browser on this host.
        """
        provider = self._providers.get(provider_id)
        url = provider.upstream_url(request)
        key = request_fingerprint(provider.id, request)

        cached = await self._cache.get(key)
        if cached is not None:
            log.info("stream_cache_hit", provider=provider.id, kind=request.kind)
            return CachedResult(cached.value, from_cache=True, cached_at=cached.cached_at)

        log.info("stream_resolving", provider=provider.id, kind=request.kind, url=url)
        stream = await self._resolver.run(url, provider.http_context(self._user_agent))
        await self._cache.put(key, stream)

        log.info(
            "stream_resolved",
            provider=provider.id,
            kind=request.kind,
            format=stream.format,
        )
        return CachedResult(stream)
