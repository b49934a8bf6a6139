"""Stream classification rules.

Rules are plain data evaluated top-down; the first matching rule decides
the format. Both the network-response path and the raw-string path use
the same URL predicates.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from streamsnare.domain.entities.streams import StreamCandidate, StreamFormat
from streamsnare.domain.ports.browser import ResponseObservation

# Responses with a known body smaller than this are treated as placeholders.
MIN_CONTENT_LENGTH = 1024


class ClassifierMode(enum.Enum):
    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class ClassifierRule:
    name: str
    predicate: Callable[[str, str], bool]
    format: StreamFormat


def _path(url: str) -> str:
    try:
        return urlsplit(url).path
    except ValueError:
        return ""


RULES: tuple[ClassifierRule, ...] = (
    ClassifierRule("m3u8_url", lambda url, ct: ".m3u8" in url, "hls"),
    ClassifierRule("mpegurl_content_type", lambda url, ct: "application/x-mpegurl" in ct, "hls"),
    ClassifierRule(
        "hls_master_path",
        lambda url, ct: "/hls/" in url and "master" in url.lower(),
        "hls",
    ),
    ClassifierRule(
        "mp4",
        lambda url, ct: ".mp4" in url or "video/mp4" in ct,
        "mp4",
    ),
    ClassifierRule(
        "live_or_stream_path",
        lambda url, ct: "/live/" in _path(url) or "/stream/" in _path(url),
        "unknown",
    ),
)


def match_rule(url: str, content_type: str = "") -> ClassifierRule | None:
    """First rule matching ``url``/``content_type``, or None."""
    ct = content_type.lower()
    for rule in RULES:
        if rule.predicate(url, ct):
            return rule
    return None


def classify_response(
    observation: ResponseObservation,
    *,
    mode: ClassifierMode,
    stage: str = "intercept",
    level: int = 0,
) -> StreamCandidate | None:
    """Classify one network response.

    Only status 200 is eligible. In SINGLE mode a known content-length
    below ``MIN_CONTENT_LENGTH`` rejects the response; MULTI mode keeps it.
    """
    if observation.status != 200:
        return None

    if mode is ClassifierMode.SINGLE:
        length = observation.content_length
        if length is not None and length < MIN_CONTENT_LENGTH:
            return None

    rule = match_rule(observation.url, observation.content_type)
    if rule is None:
        return None
    return StreamCandidate(url=observation.url, format=rule.format, stage=stage, level=level)


def classify_string(url: str, *, default: StreamFormat = "unknown") -> StreamFormat:
    """Format of a raw URL string: ``.m3u8`` -> hls, ``.mp4`` -> mp4, else ``default``."""
    if ".m3u8" in url:
        return "hls"
    if ".mp4" in url:
        return "mp4"
    return default
