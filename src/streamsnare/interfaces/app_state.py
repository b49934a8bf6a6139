"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from streamsnare.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from streamsnare.application.use_cases import ResolveStreamUseCase, SportsUseCase
    from streamsnare.domain.ports import BrowserSessionFactory, CachePort
    from streamsnare.infrastructure.browser import SharedBrowserPool
    from streamsnare.infrastructure.providers import ProviderRegistry


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    caches: list[CachePort]
    browser_pool: SharedBrowserPool
    session_factory: BrowserSessionFactory

    # Domain
    providers: ProviderRegistry

    # Application Services
    resolve_stream_uc: ResolveStreamUseCase
    sports_uc: SportsUseCase
