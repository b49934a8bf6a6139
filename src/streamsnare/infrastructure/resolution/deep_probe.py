"""Bounded recursive probing of redirect and player pages.

The traversal is depth-parameterised and shares a ``visited`` set and a
navigation budget across the whole run, so it always terminates no
matter how pages link to each other.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import structlog

from streamsnare.domain.entities.provider import DEFAULT_USER_AGENT, HttpContext
from streamsnare.domain.entities.streams import StreamCandidate
from streamsnare.domain.errors import NavigationError, NavigationTimeout
from streamsnare.domain.ports.browser import BrowserSessionFactory

from .harvest import CandidateCollector, harvest_page

log = structlog.get_logger(__name__)

PROBE_FORMATS = frozenset({"iframe", "redirect"})
PROBE_STAGES = frozenset({"player_iframe", "potential_iframe", "redirect_link", "extracted_src"})


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


@dataclass
class ProbeBudget:
    """Navigation allowance shared by all levels of one run."""

    limit: int
    used: int = 0
    visited: set[str] = field(default_factory=set)

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def claim(self, url: str) -> bool:
        """Reserve a navigation to ``url``; False if seen before or out of budget."""
        if url in self.visited or self.exhausted:
            return False
        self.visited.add(url)
        self.used += 1
        return True


class DeepProber:
    """Follows redirect/player candidates into new sessions.

    Each probe opens a fresh session whose referer is the page the
    candidate was found on, harvests it, closes it, and only then
    descends into the probe-worthy candidates it produced.
    """

    def __init__(
        self,
        factory: BrowserSessionFactory,
        *,
        max_depth: int = 2,
        max_navigations: int = 12,
        timeout_ms: int = 20_000,
        wait_seconds: float = 5.0,
        markers: Sequence[str] = (),
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._factory = factory
        self.max_depth = max_depth
        self.max_navigations = max_navigations
        self._timeout_ms = timeout_ms
        self._wait_seconds = wait_seconds
        self._markers = tuple(markers)
        self._user_agent = user_agent

    def should_probe(self, candidate: StreamCandidate) -> bool:
        if candidate.format not in PROBE_FORMATS:
            return False
        return candidate.stage in PROBE_STAGES or any(
            marker in candidate.url for marker in self._markers
        )

    async def probe(
        self,
        roots: Sequence[StreamCandidate],
        *,
        referer: str,
        collector: CandidateCollector,
        visited: set[str] | None = None,
    ) -> ProbeBudget:
        """Probe ``roots`` (found on ``referer``) up to ``max_depth`` levels."""
        budget = ProbeBudget(limit=self.max_navigations, visited=set(visited or ()))
        await self._probe_level(roots, parent_url=referer, level=1, collector=collector, budget=budget)
        log.info(
            "deep_probe_finished",
            referer=referer,
            navigations=budget.used,
            candidates=len(collector),
        )
        return budget

    async def _probe_level(
        self,
        candidates: Sequence[StreamCandidate],
        *,
        parent_url: str,
        level: int,
        collector: CandidateCollector,
        budget: ProbeBudget,
    ) -> None:
        if level > self.max_depth:
            return

        for candidate in candidates:
            if not self.should_probe(candidate):
                continue
            if budget.exhausted:
                log.info("deep_probe_budget_exhausted", limit=budget.limit, level=level)
                return
            if not budget.claim(candidate.url):
                continue

            try:
                found = await self._probe_one(candidate.url, parent_url=parent_url, level=level)
            except (NavigationTimeout, NavigationError) as exc:
                log.warning("deep_probe_failed", url=candidate.url, level=level, error=exc.message)
                continue
            except Exception:  # noqa: BLE001
                log.warning("deep_probe_failed", url=candidate.url, level=level, exc_info=True)
                continue

            collector.extend(found)
            await self._probe_level(
                found,
                parent_url=candidate.url,
                level=level + 1,
                collector=collector,
                budget=budget,
            )

    async def _probe_one(self, url: str, *, parent_url: str, level: int) -> list[StreamCandidate]:
        context = HttpContext(
            referer=parent_url,
            origin=origin_of(parent_url),
            user_agent=self._user_agent,
        )
        log.debug("deep_probe_started", url=url, referer=parent_url, level=level)
        async with self._factory.open(context) as session:
            return await harvest_page(
                session,
                url,
                level=level,
                timeout_ms=self._timeout_ms,
                wait_seconds=self._wait_seconds,
            )
