from .result_cache import (
    CANDIDATES_CODEC,
    CATEGORIES_CODEC,
    EVENTS_CODEC,
    SPORTS_ALL_CODEC,
    STREAM_CODEC,
    ResultCacheRepository,
    ResultCodec,
)

__all__ = [
    "CANDIDATES_CODEC",
    "CATEGORIES_CODEC",
    "EVENTS_CODEC",
    "SPORTS_ALL_CODEC",
    "STREAM_CODEC",
    "ResultCacheRepository",
    "ResultCodec",
]
