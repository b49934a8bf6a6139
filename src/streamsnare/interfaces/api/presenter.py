"""JSON presenter: camelCase envelopes for API responses.

Success: ``{"ok": true, ..., "fromCache": bool, "cachedAt": iso | null}``
Failure: ``{"ok": false, "error": kind, "message": text, "details": {...}}``
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi.responses import JSONResponse

from streamsnare.domain.entities.sports import (
    Category,
    CategoryEvents,
    Event,
    EventStreams,
)
from streamsnare.domain.entities.streams import (
    CachedResult,
    ResolvedStream,
    StreamCandidate,
)
from streamsnare.domain.errors import (
    NavigationError,
    NavigationTimeout,
    StreamNotFound,
    StreamsnareError,
    UnknownProvider,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def present_candidate(candidate: StreamCandidate) -> dict[str, Any]:
    return {
        "url": candidate.url,
        "format": candidate.format,
        "quality": candidate.quality,
        "stage": candidate.stage,
        "level": candidate.level,
        "name": candidate.name,
    }


def present_category(category: Category) -> dict[str, Any]:
    return {"name": category.name, "slug": category.slug, "url": category.url}


def present_event(event: Event) -> dict[str, Any]:
    return {
        "title": event.title,
        "url": event.url,
        "links": [{"name": link.name, "url": link.url} for link in event.candidate_links],
    }


def present_event_streams(row: EventStreams) -> dict[str, Any]:
    data = present_event(row.event)
    data["streams"] = [present_candidate(c) for c in row.streams]
    if row.error is not None:
        data["error"] = row.error
    return data


def present_category_events(row: CategoryEvents) -> dict[str, Any]:
    data = present_category(row.category)
    data["events"] = [present_event_streams(e) for e in row.events]
    if row.error is not None:
        data["error"] = row.error
    return data


def envelope(result: CachedResult[Any], **payload: Any) -> dict[str, Any]:
    """Wrap ``payload`` with the ok/fromCache/cachedAt fields."""
    return {
        "ok": True,
        **payload,
        "fromCache": result.from_cache,
        "cachedAt": _iso(result.cached_at),
    }


def present_stream(result: CachedResult[ResolvedStream]) -> dict[str, Any]:
    stream = result.value
    return envelope(
        result,
        url=stream.url,
        format=stream.format,
        expiresAt=_iso(stream.expires_at),
    )


def status_for(error: StreamsnareError) -> int:
    """HTTP status for a domain error."""
    if isinstance(error, (UnknownProvider, StreamNotFound)):
        return 404
    if isinstance(error, NavigationTimeout):
        return 504
    if isinstance(error, NavigationError):
        return 502
    if error.category == "request":
        return 400
    return 500


def error_response(error: StreamsnareError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(error),
        content={
            "ok": False,
            "error": error.kind,
            "message": error.message,
            "details": error.details,
        },
    )


def internal_error_response(exc: Exception, *, expose: bool) -> JSONResponse:
    """500 ``internal_error``; the exception text is only exposed outside prod."""
    content: dict[str, Any] = {
        "ok": False,
        "error": "internal_error",
        "message": "An unexpected error occurred while processing your request.",
    }
    if expose:
        content["details"] = {"internalMessage": str(exc)}
    return JSONResponse(status_code=500, content=content)
