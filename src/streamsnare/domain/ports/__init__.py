from .browser import (
    BrowserExecutableLocator,
    BrowserSessionFactory,
    BrowserSessionPort,
    RequestObservation,
    ResponseObservation,
)
from .cache import CachePort
from .result_cache import ResultCachePort

__all__ = [
    "BrowserExecutableLocator",
    "BrowserSessionFactory",
    "BrowserSessionPort",
    "CachePort",
    "RequestObservation",
    "ResponseObservation",
    "ResultCachePort",
]
