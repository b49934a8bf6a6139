"""Static scanning of a rendered page for stream candidates.

Everything here is pure: it works on the serialized DOM returned by
``BrowserSessionPort.content()`` so each heuristic is testable without a
browser.
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Iterable, Iterator
from urllib.parse import parse_qs, urlsplit

from bs4 import BeautifulSoup

from streamsnare.domain.entities.streams import StreamCandidate
from streamsnare.infrastructure.common.html_selectors import (
    absolute_url,
    attr_of,
    parse_html,
    select_each,
    text_of,
)

from .classifier import classify_string

# URLs in raw HTML, tolerating JSON-escaped slashes (https:\/\/...).
_MEDIA_URL_RE = re.compile(r"""https?:\\?/\\?/[^\s"'<>]+?\.(?:m3u8|mp4)[^\s"'<>]*""")
_SOURCE_RE = re.compile(r"""source\s*:\s*["']([^"']+)["']""")
_FILE_RE = re.compile(r"""file\s*:\s*["']([^"']+)["']""")
_ATOB_RE = re.compile(r"""atob\s*\(\s*["']([^"']+)["']\s*\)""")
_PACKED_RE = re.compile(r"eval\(function\(p,a,c,k,e,[dr]\)")
_PACKED_ARGS_RE = re.compile(
    r"}\('(.*?)',\s*(\d+),\s*(\d+),\s*'([^']*)'\s*\.split\('\|'\)",
    re.DOTALL,
)

PLAYER_ALLOW_TOKENS: tuple[str, ...] = ("autoplay", "fullscreen", "encrypted-media")
PLAYER_SRC_MARKERS: tuple[str, ...] = (
    "stream",
    "player",
    "yeahstreams",
    "wigistream",
    "m3u8",
    "getlink",
    "live",
)
EXCLUDED_IFRAME_MARKERS: tuple[str, ...] = ("google", "facebook", "twitter", "ads", "analytics")
DATA_ATTRS: tuple[str, ...] = ("data-src", "data-url", "data-stream", "data-video", "data-stream-url")

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _unescape(url: str) -> str:
    return url.replace("\\/", "/").strip()


def _is_media_like(url: str) -> bool:
    return ".m3u8" in url or ".mp4" in url


# --- packed JS ---------------------------------------------------------------


def _to_base(num: int, radix: int) -> str:
    if num < radix:
        return _DIGITS[num]
    return _to_base(num // radix, radix) + _DIGITS[num % radix]


def unpack_packed_js(packed: str) -> str | None:
    """Unpack Dean Edwards ``eval(function(p,a,c,k,e,d){...})`` JavaScript.

    Every base-N token of the payload is replaced with its dictionary
    word; tokens without a word are kept as-is. Supports radix up to 62.
    """
    match = _PACKED_ARGS_RE.search(packed)
    if not match:
        return None

    payload, radix, count = match.group(1), int(match.group(2)), int(match.group(3))
    if not 2 <= radix <= len(_DIGITS):
        return None
    words = match.group(4).split("|")
    if len(words) < count:
        words.extend([""] * (count - len(words)))

    lookup = {_to_base(i, radix): word for i, word in enumerate(words[:count]) if word}
    return re.sub(r"\b\w+\b", lambda m: lookup.get(m.group(0), m.group(0)), payload)


# --- text scanners -----------------------------------------------------------


def find_media_urls(text: str) -> list[str]:
    """All ``http(s)://...(.m3u8|.mp4)`` URLs in ``text``, unescaped, in order."""
    seen: dict[str, None] = {}
    for raw in _MEDIA_URL_RE.findall(text):
        seen.setdefault(_unescape(raw), None)
    return list(seen)


def _script_assignments(text: str) -> Iterator[tuple[str, str]]:
    for stage, pattern in (("source_regex", _SOURCE_RE), ("file_regex", _FILE_RE)):
        for raw in pattern.findall(text):
            url = _unescape(raw)
            if url.startswith("http") or _is_media_like(url):
                yield stage, url


def _atob_values(text: str) -> Iterator[str]:
    for encoded in _ATOB_RE.findall(text):
        try:
            decoded = base64.b64decode(encoded, validate=False).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            continue
        if decoded.startswith("http") or ".m3u8" in decoded:
            yield decoded.strip()


def scan_script(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(stage, url)`` pairs found in one script body."""
    yield from _script_assignments(text)
    for decoded in _atob_values(text):
        yield "atob_decoded", decoded
    if _PACKED_RE.search(text):
        unpacked = unpack_packed_js(text)
        if unpacked:
            normalized = unpacked.replace("\\'", "'").replace('\\"', '"')
            for url in find_media_urls(normalized):
                yield "packed_js", url
            for _, url in _script_assignments(normalized):
                yield "packed_js", url


# --- DOM scanners ------------------------------------------------------------


def is_player_iframe(src: str, allow: str) -> bool:
    """Iframe that looks like it hosts a video player."""
    return any(tok in allow for tok in PLAYER_ALLOW_TOKENS) or any(
        marker in src for marker in PLAYER_SRC_MARKERS
    )


def is_excluded_iframe(src: str) -> bool:
    return any(marker in src for marker in EXCLUDED_IFRAME_MARKERS)


def _iframe_candidates(soup: BeautifulSoup, page_url: str, level: int) -> Iterator[StreamCandidate]:
    for _, iframe in select_each(soup, ("iframe[src]",)):
        src = absolute_url(page_url, attr_of(iframe, "src"))
        if not src:
            continue
        allow = attr_of(iframe, "allow")
        if is_player_iframe(src, allow):
            stage = "player_iframe"
        elif not is_excluded_iframe(src):
            stage = "potential_iframe"
        else:
            continue
        yield StreamCandidate(url=src, format="iframe", stage=stage, level=level)


def _video_candidates(soup: BeautifulSoup, page_url: str, level: int) -> Iterator[StreamCandidate]:
    for sel, element in select_each(soup, ("video[src]", "video source[src]")):
        src = absolute_url(page_url, attr_of(element, "src"))
        if src and _is_media_like(src):
            stage = "video_element" if sel == "video[src]" else "video_source"
            yield StreamCandidate(url=src, format=classify_string(src), stage=stage, level=level)


def _data_attr_candidates(soup: BeautifulSoup, level: int) -> Iterator[StreamCandidate]:
    selector = ", ".join(f"[{name}]" for name in DATA_ATTRS)
    for _, element in select_each(soup, (selector,)):
        value = attr_of(element, *DATA_ATTRS)
        if value.startswith("http") and _is_media_like(value):
            yield StreamCandidate(
                url=value, format=classify_string(value), stage="data_attribute", level=level
            )


def scan_page(html: str, page_url: str, *, level: int = 0) -> list[StreamCandidate]:
    """Run every static heuristic over ``html``; candidates in discovery order.

    Order: global media-URL regex, per-script patterns (``source:``,
    ``file:``, ``atob()``, packed JS), iframes, ``<video>`` elements,
    ``data-*`` attributes. Duplicate URLs keep their first stage.
    """
    found: dict[str, StreamCandidate] = {}

    def _add(candidates: Iterable[StreamCandidate]) -> None:
        for cand in candidates:
            found.setdefault(cand.url, cand)

    _add(
        StreamCandidate(url=url, format=classify_string(url), stage="global_regex", level=level)
        for url in find_media_urls(html)
    )

    soup = parse_html(html)
    for _, script in select_each(soup, ("script",)):
        body = script.string or script.get_text()
        if not body:
            continue
        _add(
            StreamCandidate(url=url, format=classify_string(url), stage=stage, level=level)
            for stage, url in scan_script(body)
        )

    _add(_iframe_candidates(soup, page_url, level))
    _add(_video_candidates(soup, page_url, level))
    _add(_data_attr_candidates(soup, level))
    return list(found.values())


def discover_redirects(
    html: str,
    page_url: str,
    selectors: Iterable[str],
    *,
    level: int = 0,
) -> list[StreamCandidate]:
    """Links matching a provider's redirect selectors.

    Each link becomes a ``redirect`` candidate (``iframe`` for iframe
    elements); an absolute ``src`` query parameter is added as an
    ``extracted_src`` iframe candidate right after it.
    """
    soup = parse_html(html)
    found: dict[str, StreamCandidate] = {}
    for _, element in select_each(soup, selectors):
        target = absolute_url(page_url, attr_of(element, "href", "src", "data-url"))
        if not target:
            continue
        name = text_of(element) or "Watch"
        fmt = "iframe" if element.name == "iframe" else "redirect"
        found.setdefault(
            target,
            StreamCandidate(url=target, format=fmt, stage="redirect_link", level=level, name=name),
        )

        src_param = extract_src_param(target)
        if src_param:
            found.setdefault(
                src_param,
                StreamCandidate(
                    url=src_param,
                    format="iframe",
                    stage="extracted_src",
                    level=level,
                    name=f"{name} (Direct)",
                ),
            )
    return list(found.values())


def extract_src_param(url: str) -> str | None:
    """The absolute http(s) URL carried in a ``src`` query parameter, if any."""
    try:
        values = parse_qs(urlsplit(url).query).get("src", [])
    except ValueError:
        return None
    for value in values:
        if value.startswith(("http://", "https://")):
            return value
    return None
