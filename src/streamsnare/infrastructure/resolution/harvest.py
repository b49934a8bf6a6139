"""Building blocks shared by the single-stream and event pipelines."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

import structlog

from streamsnare.domain.entities.streams import StreamCandidate
from streamsnare.domain.ports.browser import BrowserSessionPort, ResponseObservation

from . import content_scan, player_probe
from .classifier import ClassifierMode, classify_response

log = structlog.get_logger(__name__)

PLAYABLE_FORMATS = frozenset({"hls", "mp4"})


class InterceptListener:
    """Response handler that classifies network traffic of one session.

    In SINGLE mode only the first playable (hls/mp4) response is kept and
    everything after it is ignored. In MULTI mode every classified
    response is kept once.
    """

    def __init__(self, mode: ClassifierMode, *, level: int = 0) -> None:
        self.mode = mode
        self.level = level
        self._accepted: dict[str, StreamCandidate] = {}

    def __call__(self, observation: ResponseObservation) -> None:
        if self.mode is ClassifierMode.SINGLE and self._accepted:
            return
        candidate = classify_response(observation, mode=self.mode, level=self.level)
        if candidate is None:
            return
        if self.mode is ClassifierMode.SINGLE and candidate.format not in PLAYABLE_FORMATS:
            return
        if candidate.url not in self._accepted:
            self._accepted[candidate.url] = candidate
            log.debug("intercept_accepted", url=candidate.url, format=candidate.format, level=self.level)

    @property
    def first(self) -> StreamCandidate | None:
        return next(iter(self._accepted.values()), None)

    @property
    def accepted(self) -> list[StreamCandidate]:
        return list(self._accepted.values())


class CandidateCollector:
    """Ordered, URL-deduplicated accumulator; the first discovery wins."""

    def __init__(self) -> None:
        self._by_url: dict[str, StreamCandidate] = {}

    def add(self, candidate: StreamCandidate) -> bool:
        if candidate.url in self._by_url:
            return False
        self._by_url[candidate.url] = candidate
        return True

    def extend(self, candidates: Iterable[StreamCandidate]) -> list[StreamCandidate]:
        """Add all; return the ones that were new."""
        return [c for c in candidates if self.add(c)]

    def __contains__(self, url: object) -> bool:
        return url in self._by_url

    def __len__(self) -> int:
        return len(self._by_url)

    def candidates(self) -> tuple[StreamCandidate, ...]:
        return tuple(self._by_url.values())


async def harvest_page(
    session: BrowserSessionPort,
    url: str,
    *,
    level: int,
    timeout_ms: int,
    wait_seconds: float,
    redirect_selectors: Sequence[str] = (),
) -> list[StreamCandidate]:
    """Collect every candidate one page exposes, without stopping early.

    Stages: passive interception (fixed wait), redirect-link discovery,
    static content scan, multi-instance player introspection. The
    navigation itself may raise; any later stage failing only loses
    that stage's output.
    """
    collector = CandidateCollector()
    listener = InterceptListener(ClassifierMode.MULTI, level=level)
    session.on_response(listener)

    await session.navigate(url, timeout_ms=timeout_ms)
    if wait_seconds > 0:
        await asyncio.sleep(wait_seconds)
    collector.extend(listener.accepted)

    page_url = session.url or url
    html = ""
    try:
        html = await session.content()
    except Exception:  # noqa: BLE001
        log.warning("page_content_failed", url=url, level=level, exc_info=True)

    if html and redirect_selectors:
        try:
            collector.extend(
                content_scan.discover_redirects(html, page_url, redirect_selectors, level=level)
            )
        except Exception:  # noqa: BLE001
            log.warning("redirect_discovery_failed", url=url, level=level, exc_info=True)

    if html:
        try:
            collector.extend(content_scan.scan_page(html, page_url, level=level))
        except Exception:  # noqa: BLE001
            log.warning("content_scan_failed", url=url, level=level, exc_info=True)

    try:
        raw = await session.evaluate(player_probe.MULTI_PLAYER_SCRIPT)
        collector.extend(player_probe.interpret_multi(raw, level=level))
    except Exception:  # noqa: BLE001
        log.warning("player_probe_failed", url=url, level=level, exc_info=True)

    # Responses that arrived while the later stages ran.
    collector.extend(listener.accepted)

    log.debug("page_harvested", url=url, level=level, candidates=len(collector))
    return list(collector.candidates())
