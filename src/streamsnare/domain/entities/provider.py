"""Provider definitions: upstream URL builders, HTTP context, DOM heuristics."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from streamsnare.domain.entities.media import MediaKind, MediaRequest
from streamsnare.domain.errors import UnsupportedCombination

ProviderKind = Literal["media", "sports"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class HttpContext:
    """Identity a browser session presents to the upstream."""

    referer: str
    origin: str
    user_agent: str = DEFAULT_USER_AGENT

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.referer:
            headers["Referer"] = self.referer
        if self.origin:
            headers["Origin"] = self.origin
        return headers


@dataclass(frozen=True)
class SportsHeuristics:
    """Ordered DOM-selector rule chains for a sports listing site.

    Every selector list is evaluated top-down; the first rule that
    yields a given link wins and later duplicates are dropped.
    """

    host: str
    category_selectors: tuple[str, ...] = ()
    category_keywords: tuple[str, ...] = ()
    category_exclude: tuple[str, ...] = ("Home", "Menu", "Login", "Register", "Contact")
    event_selectors: tuple[str, ...] = ()
    event_title_selectors: tuple[str, ...] = (
        ".title",
        ".event-title",
        ".match-title",
        "h3",
        "h4",
        ".name",
    )
    event_exclude: tuple[str, ...] = ("Home", "Menu")
    event_fallback_keywords: tuple[str, ...] = ("vs", "v ", "live", "watch", "stream")
    link_selectors: tuple[str, ...] = ()
    redirect_selectors: tuple[str, ...] = ()
    deep_probe_markers: tuple[str, ...] = ()


@dataclass(frozen=True)
class Provider:
    """An immutable upstream provider.

    ``build_url`` maps a validated request to the upstream page URL;
    support checks happen before it is called.
    """

    id: str
    kind: ProviderKind
    referer: str
    origin: str
    supports: frozenset[MediaKind]
    build_url: Callable[[MediaRequest], str] = field(compare=False)
    home_url: str = ""
    heuristics: SportsHeuristics | None = None

    def http_context(self, user_agent: str | None = None) -> HttpContext:
        if user_agent:
            return HttpContext(self.referer, self.origin, user_agent)
        return HttpContext(self.referer, self.origin)

    def upstream_url(self, request: MediaRequest) -> str:
        """Validate ``request`` and map it to this provider's page URL.

        Raises:
            MissingField: the request lacks fields required by its kind.
            UnsupportedCombination: this provider does not serve the kind.
        """
        request.validate()
        if request.kind not in self.supports:
            raise UnsupportedCombination(self.id, request.kind)
        return self.build_url(request)
