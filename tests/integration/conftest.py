"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheAdapter,
MemoryLRUAdapter, the FastAPI app and its lifespan); only the browser
stays out of the picture.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from streamsnare.infrastructure.cache.diskcache_adapter import DiskcacheAdapter


@pytest.fixture()
async def diskcache(tmp_path: Path) -> DiskcacheAdapter:
    """Real DiskcacheAdapter backed by tmp_path (auto-cleaned)."""
    adapter = DiskcacheAdapter(
        directory=tmp_path / "cache",
        namespace="streams",
        ttl_seconds=3600,
        max_concurrent=5,
    )
    async with adapter:
        yield adapter
