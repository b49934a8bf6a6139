"""Resolution pipelines.

``SingleStreamPipeline`` turns one upstream player page into exactly one
playable stream, stopping at the first stage that succeeds.
``EventStreamPipeline`` collects every candidate an event page and its
nested player pages expose.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import structlog

from streamsnare.domain.entities.provider import HttpContext, SportsHeuristics
from streamsnare.domain.entities.streams import ResolvedStream, StreamCandidate, StreamFormat
from streamsnare.domain.errors import NavigationTimeout, StreamNotFound
from streamsnare.domain.ports.browser import BrowserSessionFactory, BrowserSessionPort

from . import player_probe
from .classifier import ClassifierMode, classify_string
from .deep_probe import DeepProber
from .harvest import CandidateCollector, InterceptListener, harvest_page

log = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SingleStreamPipeline:
    """Passive interception, then player introspection, then StreamNotFound.

    The initial navigation is fatal on failure; introspection errors are
    logged and count as "no result". The whole run is bounded by
    ``overall_timeout_seconds``.
    """

    def __init__(
        self,
        factory: BrowserSessionFactory,
        *,
        navigation_timeout_ms: int = 15_000,
        intercept_wait_seconds: float = 10.0,
        poll_interval_ms: int = 250,
        overall_timeout_seconds: float = 45.0,
        stream_validity_seconds: int = 600,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._factory = factory
        self._navigation_timeout_ms = navigation_timeout_ms
        self._intercept_wait = intercept_wait_seconds
        self._poll_interval = poll_interval_ms / 1000.0
        self._overall_timeout = overall_timeout_seconds
        self._validity = timedelta(seconds=stream_validity_seconds)
        self._clock = clock

    async def run(self, url: str, http_context: HttpContext) -> ResolvedStream:
        """Resolve ``url`` to a playable stream.

        Raises:
            NavigationTimeout: page load or overall budget exceeded.
            NavigationError: the upstream page is unreachable.
            StreamNotFound: no stage found a stream.
            BrowserUnavailable: no usable browser.
        """
        try:
            return await asyncio.wait_for(self._run(url, http_context), self._overall_timeout)
        except asyncio.TimeoutError as exc:
            log.warning("resolution_timeout", url=url, timeout_s=self._overall_timeout)
            raise NavigationTimeout(
                f"Resolution of {url} exceeded {self._overall_timeout:g}s",
                details={"url": url, "timeout_s": self._overall_timeout},
            ) from exc

    async def _run(self, url: str, http_context: HttpContext) -> ResolvedStream:
        async with self._factory.open(http_context) as session:
            listener = InterceptListener(ClassifierMode.SINGLE)
            session.on_response(listener)
            await session.navigate(url, timeout_ms=self._navigation_timeout_ms)

            intercepted = await self._await_first(listener)
            if intercepted is not None:
                log.info("stream_resolved", url=url, stage="intercept", stream=intercepted.url)
                return self._resolved(intercepted.url, intercepted.format)

            introspected = await self._introspect(session, url)
            if introspected is not None:
                log.info("stream_resolved", url=url, stage="player_introspection", stream=introspected)
                return self._resolved(introspected, classify_string(introspected))

        log.info("stream_not_found", url=url)
        raise StreamNotFound(
            "No stream detected via network interception or player state.",
            details={"url": url},
        )

    async def _await_first(self, listener: InterceptListener) -> StreamCandidate | None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._intercept_wait
        while True:
            first = listener.first
            if first is not None:
                return first
            remaining = deadline - loop.time()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(self._poll_interval, remaining))

    async def _introspect(self, session: BrowserSessionPort, url: str) -> str | None:
        try:
            raw = await session.evaluate(player_probe.SINGLE_PLAYER_SCRIPT)
        except Exception:  # noqa: BLE001
            log.warning("player_introspection_failed", url=url, exc_info=True)
            return None
        return player_probe.interpret_single(raw)

    def _resolved(self, stream_url: str, fmt: StreamFormat) -> ResolvedStream:
        return ResolvedStream(
            url=stream_url,
            format=fmt,
            expires_at=self._clock() + self._validity,
        )


class EventStreamPipeline:
    """Accumulates candidates from an event page and its nested players.

    The run shares one ``overall_timeout_seconds`` budget. Running out of
    it while the event page loads raises ``NavigationTimeout``; running
    out during deep probing cancels the open probe session and returns
    what was collected so far.
    """

    def __init__(
        self,
        factory: BrowserSessionFactory,
        *,
        navigation_timeout_ms: int = 15_000,
        probe_navigation_timeout_ms: int = 20_000,
        intercept_wait_seconds: float = 5.0,
        max_probe_depth: int = 2,
        max_probe_navigations: int = 12,
        overall_timeout_seconds: float = 90.0,
    ) -> None:
        self._factory = factory
        self._navigation_timeout_ms = navigation_timeout_ms
        self._probe_navigation_timeout_ms = probe_navigation_timeout_ms
        self._intercept_wait = intercept_wait_seconds
        self._max_probe_depth = max_probe_depth
        self._max_probe_navigations = max_probe_navigations
        self._overall_timeout = overall_timeout_seconds

    async def run(
        self,
        event_url: str,
        http_context: HttpContext,
        heuristics: SportsHeuristics | None = None,
    ) -> tuple[StreamCandidate, ...]:
        """All candidates for ``event_url`` in discovery order.

        Raises:
            NavigationTimeout / NavigationError: the event page itself failed
                or did not finish within the overall budget.
        """
        redirect_selectors = heuristics.redirect_selectors if heuristics else ()
        markers = heuristics.deep_probe_markers if heuristics else ()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._overall_timeout
        collector = CandidateCollector()

        try:
            await asyncio.wait_for(
                self._harvest_event(event_url, http_context, redirect_selectors, collector),
                self._overall_timeout,
            )
        except asyncio.TimeoutError as exc:
            log.warning("event_extraction_timeout", event_url=event_url, timeout_s=self._overall_timeout)
            raise NavigationTimeout(
                f"Extraction of {event_url} exceeded {self._overall_timeout:g}s",
                details={"url": event_url, "timeout_s": self._overall_timeout},
            ) from exc

        remaining = deadline - loop.time()
        if remaining > 0:
            try:
                await asyncio.wait_for(
                    self._deep_probe(event_url, http_context, markers, collector), remaining
                )
            except asyncio.TimeoutError:
                log.warning(
                    "deep_probe_deadline_reached",
                    event_url=event_url,
                    timeout_s=self._overall_timeout,
                    collected=len(collector),
                )
        else:
            log.warning("deep_probe_skipped_no_budget", event_url=event_url)

        candidates = collector.candidates()
        log.info(
            "event_streams_extracted",
            event_url=event_url,
            candidates=len(candidates),
            playable=sum(1 for c in candidates if c.is_playable),
        )
        return candidates

    async def _harvest_event(
        self,
        event_url: str,
        http_context: HttpContext,
        redirect_selectors: tuple[str, ...],
        collector: CandidateCollector,
    ) -> None:
        async with self._factory.open(http_context) as session:
            collector.extend(
                await harvest_page(
                    session,
                    event_url,
                    level=0,
                    timeout_ms=self._navigation_timeout_ms,
                    wait_seconds=self._intercept_wait,
                    redirect_selectors=redirect_selectors,
                )
            )

    async def _deep_probe(
        self,
        event_url: str,
        http_context: HttpContext,
        markers: tuple[str, ...],
        collector: CandidateCollector,
    ) -> None:
        prober = DeepProber(
            self._factory,
            max_depth=self._max_probe_depth,
            max_navigations=self._max_probe_navigations,
            timeout_ms=self._probe_navigation_timeout_ms,
            wait_seconds=self._intercept_wait,
            markers=markers,
            user_agent=http_context.user_agent,
        )
        await prober.probe(
            collector.candidates(),
            referer=event_url,
            collector=collector,
            visited={event_url},
        )
