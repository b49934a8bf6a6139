"""Fingerprint-keyed result repository backed by CachePort."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

import structlog

from streamsnare.domain.entities.sports import (
    Category,
    CategoryEvents,
    Event,
    EventLink,
    EventStreams,
)
from streamsnare.domain.entities.streams import (
    CacheEntry,
    ResolvedStream,
    StreamCandidate,
)
from streamsnare.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(raw: str) -> datetime:
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# --- entity <-> plain data ---------------------------------------------------


def _candidate_to_data(c: StreamCandidate) -> dict[str, Any]:
    return {
        "url": c.url,
        "format": c.format,
        "stage": c.stage,
        "quality": c.quality,
        "level": c.level,
        "name": c.name,
    }


def _candidate_from_data(d: dict[str, Any]) -> StreamCandidate:
    return StreamCandidate(
        url=d["url"],
        format=d["format"],
        stage=d["stage"],
        quality=d.get("quality", "unknown"),
        level=d.get("level", 0),
        name=d.get("name"),
    )


def _category_to_data(c: Category) -> dict[str, Any]:
    return {"name": c.name, "slug": c.slug, "url": c.url}


def _category_from_data(d: dict[str, Any]) -> Category:
    return Category(name=d["name"], slug=d["slug"], url=d["url"])


def _event_to_data(e: Event) -> dict[str, Any]:
    return {
        "title": e.title,
        "url": e.url,
        "links": [{"name": lk.name, "url": lk.url} for lk in e.candidate_links],
    }


def _event_from_data(d: dict[str, Any]) -> Event:
    return Event(
        title=d["title"],
        url=d["url"],
        candidate_links=tuple(
            EventLink(name=lk["name"], url=lk["url"]) for lk in d.get("links", [])
        ),
    )


def _event_streams_to_data(es: EventStreams) -> dict[str, Any]:
    return {
        "event": _event_to_data(es.event),
        "streams": [_candidate_to_data(c) for c in es.streams],
        "error": es.error,
    }


def _event_streams_from_data(d: dict[str, Any]) -> EventStreams:
    return EventStreams(
        event=_event_from_data(d["event"]),
        streams=tuple(_candidate_from_data(c) for c in d.get("streams", [])),
        error=d.get("error"),
    )


@dataclass(frozen=True)
class ResultCodec(Generic[T]):
    """Pair of functions turning a result value into JSON data and back."""

    name: str
    encode: Callable[[T], Any]
    decode: Callable[[Any], T]


STREAM_CODEC: ResultCodec[ResolvedStream] = ResultCodec(
    name="stream",
    encode=lambda s: {
        "url": s.url,
        "format": s.format,
        "expires_at": s.expires_at.isoformat(),
    },
    decode=lambda d: ResolvedStream(
        url=d["url"], format=d["format"], expires_at=_parse_dt(d["expires_at"])
    ),
)

CATEGORIES_CODEC: ResultCodec[tuple[Category, ...]] = ResultCodec(
    name="categories",
    encode=lambda cats: [_category_to_data(c) for c in cats],
    decode=lambda data: tuple(_category_from_data(d) for d in data),
)

EVENTS_CODEC: ResultCodec[tuple[Event, ...]] = ResultCodec(
    name="events",
    encode=lambda events: [_event_to_data(e) for e in events],
    decode=lambda data: tuple(_event_from_data(d) for d in data),
)

CANDIDATES_CODEC: ResultCodec[tuple[StreamCandidate, ...]] = ResultCodec(
    name="event-streams",
    encode=lambda cands: [_candidate_to_data(c) for c in cands],
    decode=lambda data: tuple(_candidate_from_data(d) for d in data),
)

SPORTS_ALL_CODEC: ResultCodec[tuple[CategoryEvents, ...]] = ResultCodec(
    name="sports-all",
    encode=lambda rows: [
        {
            "category": _category_to_data(r.category),
            "events": [_event_streams_to_data(es) for es in r.events],
            "error": r.error,
        }
        for r in rows
    ],
    decode=lambda data: tuple(
        CategoryEvents(
            category=_category_from_data(d["category"]),
            events=tuple(_event_streams_from_data(es) for es in d.get("events", [])),
            error=d.get("error"),
        )
        for d in data
    ),
)


# --- repository --------------------------------------------------------------


class ResultCacheRepository(Generic[T]):
    """Stores CacheEntry records for one result kind via CachePort.

    The backend TTL is only an eviction hint: ``get`` re-checks
    ``now < expires_at`` itself so a lagging backend never serves a
    stale entry.
    """

    def __init__(
        self,
        cache: CachePort,
        codec: ResultCodec[T],
        *,
        ttl_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cache = cache
        self.codec = codec
        self.ttl = ttl_seconds
        self._clock = clock

    def _serialize(self, entry: CacheEntry[T]) -> str:
        return json.dumps(
            {
                "fingerprint": entry.fingerprint,
                "value": self.codec.encode(entry.value),
                "cached_at": entry.cached_at.isoformat(),
                "expires_at": entry.expires_at.isoformat(),
            }
        )

    def _deserialize(self, raw: str) -> CacheEntry[T]:
        d = json.loads(raw)
        return CacheEntry(
            fingerprint=d["fingerprint"],
            value=self.codec.decode(d["value"]),
            cached_at=_parse_dt(d["cached_at"]),
            expires_at=_parse_dt(d["expires_at"]),
        )

    async def get(self, fingerprint: str) -> CacheEntry[T] | None:
        raw = await self.cache.get(fingerprint)
        if raw is None:
            log.debug("result_cache_miss", kind=self.codec.name, fingerprint=fingerprint)
            return None

        try:
            entry = self._deserialize(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error(
                "result_cache_deserialize_error",
                kind=self.codec.name,
                fingerprint=fingerprint,
                error=str(e),
            )
            return None

        if not entry.is_fresh(self._clock()):
            log.debug("result_cache_expired", kind=self.codec.name, fingerprint=fingerprint)
            await self.cache.delete(fingerprint)
            return None

        log.debug("result_cache_hit", kind=self.codec.name, fingerprint=fingerprint)
        return entry

    async def put(
        self, fingerprint: str, value: T, *, ttl_seconds: int | None = None
    ) -> CacheEntry[T]:
        ttl = self.ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        entry = CacheEntry(
            fingerprint=fingerprint,
            value=value,
            cached_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        await self.cache.set(fingerprint, self._serialize(entry), ttl=ttl)
        log.debug("result_cache_stored", kind=self.codec.name, fingerprint=fingerprint, ttl=ttl)
        return entry
