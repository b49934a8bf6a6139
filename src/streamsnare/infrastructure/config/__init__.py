from __future__ import annotations

from .load import load_config
from .schema import AppConfig, BrowserConfig, CacheConfig, EnvOverrides, ResolutionConfig

__all__ = [
    "AppConfig",
    "BrowserConfig",
    "CacheConfig",
    "EnvOverrides",
    "ResolutionConfig",
    "load_config",
]
