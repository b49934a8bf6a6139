"""Single-stream resolution endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.errors import StreamsnareError
from streamsnare.interfaces.api.presenter import (
    error_response,
    internal_error_response,
    present_stream,
)
from streamsnare.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["streams"])


@router.get("/stream")
async def resolve_stream(
    request: Request,
    provider: str = Query("vidlink"),
    type: str | None = Query(None),
    tmdb_id: str | None = Query(None, alias="tmdbId"),
    season: str | None = Query(None),
    episode: str | None = Query(None),
    mal_id: str | None = Query(None, alias="malId"),
    number: str | None = Query(None),
    sub_or_dub: str | None = Query(None, alias="subOrDub"),
    event_url: str | None = Query(None, alias="eventUrl"),
) -> JSONResponse:
    """Resolve one title/episode/event to a playable stream URL."""
    state = cast(AppState, request.app.state)
    try:
        media = MediaRequest.from_params(
            type or "",
            tmdb_id=tmdb_id,
            season=season,
            episode=episode,
            mal_id=mal_id,
            episode_number=number,
            sub_or_dub=sub_or_dub,
            event_url=event_url,
        )
        result = await state.resolve_stream_uc.execute(provider, media)
    except StreamsnareError as e:
        log.info("stream_request_failed", provider=provider, type=type, error=e.kind)
        return error_response(e)
    except Exception as e:
        log.exception("stream_unhandled_error", provider=provider, type=type)
        return internal_error_response(e, expose=state.config.environment != "prod")

    return JSONResponse(content=present_stream(result))
