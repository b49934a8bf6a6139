"""Sports listing and event stream endpoints."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from streamsnare.application.use_cases import SportsUseCase
from streamsnare.domain.entities.streams import CachedResult
from streamsnare.domain.errors import MissingField, StreamsnareError
from streamsnare.interfaces.api.presenter import (
    envelope,
    error_response,
    internal_error_response,
    present_candidate,
    present_category,
    present_category_events,
    present_event,
)
from streamsnare.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/sports", tags=["sports"])


async def _respond(
    request: Request,
    operation: str,
    call: Callable[[], Awaitable[CachedResult[Any]]],
    render: Callable[[CachedResult[Any]], dict[str, Any]],
    **log_fields: Any,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        result = await call()
    except StreamsnareError as e:
        log.info(f"{operation}_failed", error=e.kind, **log_fields)
        return error_response(e)
    except Exception as e:
        log.exception(f"{operation}_unhandled_error", **log_fields)
        return internal_error_response(e, expose=state.config.environment != "prod")
    return JSONResponse(content=render(result))


def _sports_uc(request: Request) -> SportsUseCase:
    return cast(AppState, request.app.state).sports_uc


@router.get("/{provider}/categories")
async def list_categories(request: Request, provider: str) -> JSONResponse:
    uc = _sports_uc(request)
    return await _respond(
        request,
        "sports_categories",
        lambda: uc.list_categories(provider),
        lambda r: envelope(r, categories=[present_category(c) for c in r.value]),
        provider=provider,
    )


@router.get("/{provider}/categories/{slug}/events")
async def list_events(
    request: Request,
    provider: str,
    slug: str,
    url: str | None = Query(None),
) -> JSONResponse:
    """Events of a category; ``?url=`` takes precedence over the slug."""
    uc = _sports_uc(request)
    target = url or slug
    return await _respond(
        request,
        "sports_events",
        lambda: uc.list_events(provider, target),
        lambda r: envelope(r, events=[present_event(e) for e in r.value]),
        provider=provider,
        category=target,
    )


@router.get("/{provider}/events/streams")
async def extract_event_streams(
    request: Request,
    provider: str,
    event_url: str | None = Query(None, alias="eventUrl"),
) -> JSONResponse:
    uc = _sports_uc(request)

    async def _call() -> CachedResult[Any]:
        if not event_url:
            raise MissingField(["eventUrl"])
        return await uc.extract_event_streams(provider, event_url)

    return await _respond(
        request,
        "sports_event_streams",
        _call,
        lambda r: envelope(
            r,
            eventUrl=event_url,
            streams=[present_candidate(c) for c in r.value],
        ),
        provider=provider,
        event_url=event_url,
    )


@router.get("/{provider}/all")
async def list_all_sports_data(request: Request, provider: str) -> JSONResponse:
    """Full crawl: categories, their events and each event's streams."""
    uc = _sports_uc(request)
    return await _respond(
        request,
        "sports_crawl",
        lambda: uc.list_all_sports_data(provider),
        lambda r: envelope(r, data=[present_category_events(row) for row in r.value]),
        provider=provider,
    )
