"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "streamsnare",
    "environment": "dev",
    "browser": {
        "headless": True,
        "stealth": False,
        "executable_path": None,
        "navigation_timeout_ms": 15_000,
        "probe_navigation_timeout_ms": 20_000,
    },
    "resolution": {
        "intercept_wait_seconds": 10.0,
        "intercept_wait_seconds_multi": 5.0,
        "poll_interval_ms": 250,
        "overall_timeout_seconds": 45.0,
        "overall_timeout_seconds_multi": 90.0,
        "stream_validity_seconds": 600,
        "max_probe_depth": 2,
        "max_probe_navigations": 12,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.cache/streamsnare",
        "redis_url": "redis://localhost:6379/0",
        "stream_ttl_seconds": 420,
        "categories_ttl_seconds": 3600,
        "events_ttl_seconds": 900,
        "event_streams_ttl_seconds": 300,
        "sports_all_ttl_seconds": 900,
        "stream_max_entries": 500,
        "listing_max_entries": 100,
        "max_concurrent": 10,
    },
}
