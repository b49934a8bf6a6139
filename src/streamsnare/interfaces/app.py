"""FastAPI application factory (build_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from streamsnare.infrastructure.config import AppConfig
from streamsnare.interfaces.app_state import AppState
from streamsnare.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app - configuration ONLY, NO resource initialization.

    Resources (caches, browser pool, use cases) are created in lifespan().
    """
    app = FastAPI(
        title="Streamsnare",
        description="Headless-browser stream URL resolver and sports listing scraper",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from streamsnare.interfaces.api.sports.router import router as sports_router
    from streamsnare.interfaces.api.streams.router import router as streams_router

    app.include_router(streams_router, prefix="/api/v1")
    app.include_router(sports_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | bool | list[str]]:
        """Liveness probe - returns 200 as long as the process is running."""
        state = app.state
        providers = getattr(state, "providers", None)
        pool = getattr(state, "browser_pool", None)
        return {
            "status": "up",
            "providers": providers.list_ids() if providers else [],
            "browser": bool(pool and pool.is_running),
        }

    @app.exception_handler(404)
    async def not_found(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "ok": False,
                "error": "not_found",
                "message": "Route not found.",
                "details": {"method": request.method, "path": request.url.path},
            },
        )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
