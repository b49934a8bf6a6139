"""Built-in upstream providers.

Media providers map ids to embed-player URLs; sports providers pass the
event URL through and carry the DOM heuristics used to crawl their
listing pages.
"""

from __future__ import annotations

from urllib.parse import quote

from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.provider import Provider, SportsHeuristics


def _enc(value: str | None) -> str:
    """Percent-encode a single path segment (``/`` included)."""
    return quote(value or "", safe="")


# --- vidlink -----------------------------------------------------------------

_VIDLINK_BASE = "https://vidlink.pro"


def _vidlink_url(request: MediaRequest) -> str:
    if request.kind == "movie":
        path = f"/movie/{_enc(request.tmdb_id)}"
    elif request.kind == "tv":
        path = (
            f"/tv/{_enc(request.tmdb_id)}"
            f"/{_enc(request.season)}/{_enc(request.episode)}"
        )
    else:
        path = (
            f"/anime/{_enc(request.mal_id)}"
            f"/{_enc(request.episode_number)}/{_enc(request.sub_or_dub)}"
        )
    return f"{_VIDLINK_BASE}{path}?player=jw"


VIDLINK = Provider(
    id="vidlink",
    kind="media",
    referer=f"{_VIDLINK_BASE}/",
    origin=_VIDLINK_BASE,
    supports=frozenset({"movie", "tv", "anime"}),
    build_url=_vidlink_url,
    home_url=_VIDLINK_BASE,
)


# --- filmex ------------------------------------------------------------------

_FILMEX_BASE = "https://filmex.to"


def _filmex_url(request: MediaRequest) -> str:
    if request.kind == "movie":
        return f"{_FILMEX_BASE}/embed/movie/{_enc(request.tmdb_id)}"
    return (
        f"{_FILMEX_BASE}/embed/tv/{_enc(request.tmdb_id)}"
        f"/{_enc(request.season)}/{_enc(request.episode)}"
    )


FILMEX = Provider(
    id="filmex",
    kind="media",
    referer=f"{_FILMEX_BASE}/",
    origin=_FILMEX_BASE,
    supports=frozenset({"movie", "tv"}),
    build_url=_filmex_url,
    home_url=_FILMEX_BASE,
)


# --- sports ------------------------------------------------------------------


def _event_passthrough(request: MediaRequest) -> str:
    return request.event_url or ""


_EVENT_SELECTORS_COMMON: tuple[str, ...] = (
    'a[href*="/watch/"]',
    'a[href*="/play/"]',
    'a[href*="/live/"]',
    'a[href*="/stream/"]',
)

_LINK_SELECTORS_COMMON: tuple[str, ...] = (
    'a[href*="/link/"]',
    'a[href*="/stream/"]',
    ".link-btn",
    '[class*="link"] a',
)

_CRICWATCH_BASE = "https://cricwatch.io"

CRICWATCH = Provider(
    id="cricwatch",
    kind="sports",
    referer=f"{_CRICWATCH_BASE}/",
    origin=_CRICWATCH_BASE,
    supports=frozenset({"sports-event"}),
    build_url=_event_passthrough,
    home_url=_CRICWATCH_BASE,
    heuristics=SportsHeuristics(
        host="cricwatch.io",
        category_selectors=(
            'a[href*="world-cup-streams"]',
            'a[href*="the-ashes-streams"]',
            'a[href*="test-streams"]',
            'a[href*="odi-streams"]',
            'a[href*="t20-streams"]',
        ),
        category_keywords=("cricket", "streams", "test", "odi", "t20", "ashes"),
        category_exclude=("Home", "⇊"),
        event_selectors=(
            ".match-item",
            ".game-item",
            ".video-item",
            *_EVENT_SELECTORS_COMMON,
            '[class*="match"] a',
            '[class*="game"] a',
            '[class*="video"] a',
            'a[href*="vs"]',
            'a[href*="v-"]',
        ),
        event_title_selectors=(".title", ".match-title", "h3", "h4", ".name"),
        link_selectors=_LINK_SELECTORS_COMMON,
        redirect_selectors=('iframe[src*="partytown"]',),
        deep_probe_markers=("partytown", "stream-", "tv/stream"),
    ),
)

_TOTALSPORTEK_BASE = "https://totalsportek.es"

TOTALSPORTEK = Provider(
    id="totalsportek",
    kind="sports",
    referer=f"{_TOTALSPORTEK_BASE}/",
    origin=_TOTALSPORTEK_BASE,
    supports=frozenset({"sports-event"}),
    build_url=_event_passthrough,
    home_url=_TOTALSPORTEK_BASE,
    heuristics=SportsHeuristics(
        host="totalsportek.es",
        category_selectors=(
            'nav a[href*="/"]',
            '.menu a[href*="/"]',
            '.navbar a[href*="/"]',
            '.navigation a[href*="/"]',
            'a[href*="football"]',
            'a[href*="basketball"]',
            'a[href*="nba"]',
            'a[href*="cricket"]',
            'a[href*="tennis"]',
            'a[href*="boxing"]',
            'a[href*="mma"]',
            'a[href*="ufc"]',
            ".sport-category a",
            ".category-item a",
            '[class*="sport"] a',
            '[class*="category"] a',
        ),
        category_keywords=(
            "football",
            "basketball",
            "nba",
            "cricket",
            "tennis",
            "boxing",
            "mma",
            "ufc",
            "soccer",
            "baseball",
            "hockey",
            "golf",
            "racing",
            "motorsport",
        ),
        event_selectors=(
            ".event-item",
            ".match-item",
            ".game-item",
            ".video-item",
            *_EVENT_SELECTORS_COMMON,
            '[class*="event"] a',
            '[class*="match"] a',
            '[class*="game"] a',
            '[class*="video"] a',
            'a[href*="vs"]',
            'a[href*="v-"]',
            ".stream-link",
            ".watch-link",
            ".live-link",
        ),
        link_selectors=(*_LINK_SELECTORS_COMMON, ".stream-option", ".watch-option"),
        redirect_selectors=(
            'a[href*="hitlinks.online"]',
            'a[href*="yeahstreams.com"]',
            'a[href*="totwatch.php"]',
            'a[href*="totview.php"]',
        ),
        deep_probe_markers=(
            "yeahstreams.com",
            "hitlinks.online",
            "stream-",
            "tv/stream",
        ),
    ),
)

BUILTIN_PROVIDERS: tuple[Provider, ...] = (VIDLINK, FILMEX, CRICWATCH, TOTALSPORTEK)
