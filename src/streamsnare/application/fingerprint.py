"""Deterministic cache keys for external operations."""

from __future__ import annotations

import hashlib
import json
from typing import Literal

from streamsnare.domain.entities.media import MediaRequest

Scope = Literal["stream", "categories", "events", "event-streams", "sports-all"]


def fingerprint(scope: Scope, provider_id: str, **fields: str) -> str:
    """Return ``"<scope>:<sha256>"`` over a canonical JSON document.

    Keys are sorted and separators fixed, so equal inputs always map to
    the same key and the scope prefix keeps different operations apart
    even for identical field values.
    """
    document = json.dumps(
        {"scope": scope, "provider": provider_id, "fields": fields},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    digest = hashlib.sha256(document.encode("utf-8")).hexdigest()
    return f"{scope}:{digest}"


def request_fingerprint(provider_id: str, request: MediaRequest) -> str:
    """Fingerprint for a single-stream resolution."""
    return fingerprint("stream", provider_id, **request.identity())
