from .media import MEDIA_KINDS, MediaKind, MediaRequest, SubOrDub
from .provider import (
    DEFAULT_USER_AGENT,
    HttpContext,
    Provider,
    ProviderKind,
    SportsHeuristics,
)
from .sports import Category, CategoryEvents, Event, EventLink, EventStreams
from .streams import (
    STREAM_FORMATS,
    CachedResult,
    CacheEntry,
    ResolvedStream,
    StreamCandidate,
    StreamFormat,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "MEDIA_KINDS",
    "STREAM_FORMATS",
    "CacheEntry",
    "CachedResult",
    "Category",
    "CategoryEvents",
    "Event",
    "EventLink",
    "EventStreams",
    "HttpContext",
    "MediaKind",
    "MediaRequest",
    "Provider",
    "ProviderKind",
    "ResolvedStream",
    "SportsHeuristics",
    "StreamCandidate",
    "StreamFormat",
    "SubOrDub",
]
