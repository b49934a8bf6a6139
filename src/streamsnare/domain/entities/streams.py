"""Stream candidates, resolved streams and cache envelopes.

Pure value objects -- no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Literal, TypeVar

StreamFormat = Literal["hls", "mp4", "iframe", "redirect", "unknown"]

STREAM_FORMATS: tuple[StreamFormat, ...] = (
    "hls",
    "mp4",
    "iframe",
    "redirect",
    "unknown",
)

T = TypeVar("T")


@dataclass(frozen=True)
class StreamCandidate:
    """A URL believed to point at playable content.

    ``stage`` names the pipeline stage that found it (e.g. ``"intercept"``,
    ``"global_regex"``, ``"player_iframe"``); ``level`` is the deep-probe
    nesting level (0 = the event page itself).
    """

    url: str
    format: StreamFormat
    stage: str
    quality: str = "unknown"
    level: int = 0
    name: str | None = None

    @property
    def is_playable(self) -> bool:
        return self.format in ("hls", "mp4")


@dataclass(frozen=True)
class ResolvedStream:
    """Outcome of a successful single-stream resolution."""

    url: str
    format: StreamFormat
    expires_at: datetime


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with its lifetime.

    Eligible for return only while ``now < expires_at``.
    """

    fingerprint: str
    value: T
    cached_at: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class CachedResult(Generic[T]):
    """Envelope returned by every external operation."""

    value: T
    from_cache: bool = False
    cached_at: datetime | None = None
