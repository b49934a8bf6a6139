"""Error taxonomy for stream resolution and sports scraping.

Every error carries a machine-readable ``kind`` and a ``category`` that
tells callers whose problem it is:

- ``request``  -- the request was invalid, the caller must change it
- ``upstream`` -- the upstream page could not be resolved right now
- ``server``   -- this server is misconfigured
"""

from __future__ import annotations

from typing import Any, Literal

ErrorCategory = Literal["request", "upstream", "server"]


class StreamsnareError(Exception):
    """Base class for all resolution errors."""

    kind: str = "internal_error"
    category: ErrorCategory = "server"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class UnknownProvider(StreamsnareError):
    """Raised when a provider id is not registered."""

    kind = "unknown_provider"
    category: ErrorCategory = "request"

    def __init__(self, provider_id: str, known: list[str] | None = None) -> None:
        super().__init__(
            f"Unknown provider {provider_id!r}.",
            details={"provider": provider_id, "known": known or []},
        )
        self.provider_id = provider_id


class UnsupportedCombination(StreamsnareError):
    """Raised when a provider cannot serve the requested media kind."""

    kind = "unsupported_combination"
    category: ErrorCategory = "request"

    def __init__(self, provider_id: str, media_kind: str) -> None:
        super().__init__(
            f'Provider "{provider_id}" does not support {media_kind} requests.',
            details={"provider": provider_id, "kind": media_kind},
        )
        self.provider_id = provider_id
        self.media_kind = media_kind


class MissingField(StreamsnareError):
    """Raised when a MediaRequest lacks required fields or has invalid values."""

    kind = "validation_error"
    category: ErrorCategory = "request"

    def __init__(self, fields: list[str], message: str | None = None) -> None:
        super().__init__(
            message or f"Missing required field(s): {', '.join(fields)}.",
            details={"missing": list(fields)},
        )
        self.fields = list(fields)


class BrowserUnavailable(StreamsnareError):
    """Raised when no native browser executable can be located or launched."""

    kind = "browser_not_found"
    category: ErrorCategory = "server"


class NavigationTimeout(StreamsnareError):
    """Raised when an upstream page does not load within its time budget."""

    kind = "upstream_timeout"
    category: ErrorCategory = "upstream"


class NavigationError(StreamsnareError):
    """Raised when an upstream page is unreachable or answers with an error."""

    kind = "upstream_error"
    category: ErrorCategory = "upstream"


class StreamNotFound(StreamsnareError):
    """Raised when every resolution stage came up empty."""

    kind = "stream_not_found"
    category: ErrorCategory = "upstream"
