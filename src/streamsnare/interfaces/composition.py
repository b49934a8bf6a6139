"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from streamsnare.application.use_cases import ResolveStreamUseCase, SportsUseCase
from streamsnare.domain.ports import CachePort
from streamsnare.infrastructure.browser import (
    PlaywrightSessionFactory,
    SharedBrowserPool,
    make_locator,
)
from streamsnare.infrastructure.cache.cache_factory import create_cache
from streamsnare.infrastructure.config.schema import AppConfig
from streamsnare.infrastructure.persistence import (
    CANDIDATES_CODEC,
    CATEGORIES_CODEC,
    EVENTS_CODEC,
    SPORTS_ALL_CODEC,
    STREAM_CODEC,
    ResultCacheRepository,
)
from streamsnare.infrastructure.providers import ProviderRegistry
from streamsnare.infrastructure.resolution import (
    EventStreamPipeline,
    SingleStreamPipeline,
)
from streamsnare.infrastructure.sports import SportsExtractor
from streamsnare.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


async def _open_cache(
    config: AppConfig, namespace: str, *, ttl_seconds: int, max_entries: int
) -> CachePort:
    cache = create_cache(
        backend=config.cache.backend,
        namespace=namespace,
        max_entries=max_entries,
        directory=config.cache.directory,
        redis_url=config.cache.redis_url,
        ttl_seconds=ttl_seconds,
        max_concurrent=config.cache.max_concurrent,
    )
    await cache.__aenter__()
    if config.environment == "dev":
        await cache.clear()
        log.debug("cache_cleared", namespace=namespace, environment="dev")
    return cache


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Result caches (one namespace per result kind)
        2. Browser pool + session factory (Chromium is launched lazily)
        3. Provider registry
        4. Pipelines + extractor
        5. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config
    cache_cfg = config.cache

    # 1) Result caches
    stream_cache = await _open_cache(
        config,
        "streams",
        ttl_seconds=cache_cfg.stream_ttl_seconds,
        max_entries=cache_cfg.stream_max_entries,
    )
    categories_cache = await _open_cache(
        config,
        "categories",
        ttl_seconds=cache_cfg.categories_ttl_seconds,
        max_entries=cache_cfg.listing_max_entries,
    )
    events_cache = await _open_cache(
        config,
        "events",
        ttl_seconds=cache_cfg.events_ttl_seconds,
        max_entries=cache_cfg.listing_max_entries,
    )
    event_streams_cache = await _open_cache(
        config,
        "event-streams",
        ttl_seconds=cache_cfg.event_streams_ttl_seconds,
        max_entries=cache_cfg.listing_max_entries,
    )
    sports_all_cache = await _open_cache(
        config,
        "sports-all",
        ttl_seconds=cache_cfg.sports_all_ttl_seconds,
        max_entries=cache_cfg.listing_max_entries,
    )
    state.caches = [
        stream_cache,
        categories_cache,
        events_cache,
        event_streams_cache,
        sports_all_cache,
    ]
    log.info("caches_initialized", backend=cache_cfg.backend, count=len(state.caches))

    # 2) Browser pool (Chromium starts on first session checkout)
    state.browser_pool = SharedBrowserPool(
        locator=make_locator(config.browser.executable_path),
        headless=config.browser.headless,
        launch_args=config.browser.launch_args,
    )
    state.session_factory = PlaywrightSessionFactory(
        state.browser_pool,
        stealth=config.browser.stealth,
    )
    log.info(
        "browser_pool_configured",
        headless=config.browser.headless,
        stealth=config.browser.stealth,
    )

    # 3) Providers
    state.providers = ProviderRegistry()
    log.info("providers_registered", providers=state.providers.list_ids())

    # 4) Pipelines
    resolution = config.resolution
    single_pipeline = SingleStreamPipeline(
        state.session_factory,
        navigation_timeout_ms=config.browser.navigation_timeout_ms,
        intercept_wait_seconds=resolution.intercept_wait_seconds,
        poll_interval_ms=resolution.poll_interval_ms,
        overall_timeout_seconds=resolution.overall_timeout_seconds,
        stream_validity_seconds=resolution.stream_validity_seconds,
    )
    event_pipeline = EventStreamPipeline(
        state.session_factory,
        navigation_timeout_ms=config.browser.navigation_timeout_ms,
        probe_navigation_timeout_ms=config.browser.probe_navigation_timeout_ms,
        intercept_wait_seconds=resolution.intercept_wait_seconds_multi,
        max_probe_depth=resolution.max_probe_depth,
        max_probe_navigations=resolution.max_probe_navigations,
        overall_timeout_seconds=resolution.overall_timeout_seconds_multi,
    )
    extractor = SportsExtractor(
        state.session_factory,
        navigation_timeout_ms=config.browser.navigation_timeout_ms,
        user_agent=config.browser.user_agent,
    )

    # 5) Use cases
    state.resolve_stream_uc = ResolveStreamUseCase(
        state.providers,
        single_pipeline,
        ResultCacheRepository(
            stream_cache, STREAM_CODEC, ttl_seconds=cache_cfg.stream_ttl_seconds
        ),
        user_agent=config.browser.user_agent,
    )
    state.sports_uc = SportsUseCase(
        state.providers,
        extractor,
        event_pipeline,
        categories_cache=ResultCacheRepository(
            categories_cache,
            CATEGORIES_CODEC,
            ttl_seconds=cache_cfg.categories_ttl_seconds,
        ),
        events_cache=ResultCacheRepository(
            events_cache, EVENTS_CODEC, ttl_seconds=cache_cfg.events_ttl_seconds
        ),
        streams_cache=ResultCacheRepository(
            event_streams_cache,
            CANDIDATES_CODEC,
            ttl_seconds=cache_cfg.event_streams_ttl_seconds,
        ),
        all_cache=ResultCacheRepository(
            sports_all_cache,
            SPORTS_ALL_CODEC,
            ttl_seconds=cache_cfg.sports_all_ttl_seconds,
        ),
        user_agent=config.browser.user_agent,
    )
    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.session_factory.cleanup()
        log.info("browser_pool_cleaned_up")

        for cache in state.caches:
            await cache.aclose()
        log.info("caches_closed")

        log.info("app_shutdown_complete")
