"""Tests for sports listing parsing and SportsExtractor."""

from __future__ import annotations

import pytest

from streamsnare.domain.entities.provider import SportsHeuristics
from streamsnare.domain.entities.sports import Category, EventLink
from streamsnare.infrastructure.providers.builtin import CRICWATCH, TOTALSPORTEK, VIDLINK
from streamsnare.infrastructure.sports.extractor import (
    SportsExtractor,
    parse_categories,
    parse_events,
    slug_of,
)

_CRICWATCH_HOME = """
<nav>
  <a href="/">Home</a>
  <a href="/world-cup-streams/">World Cup Streams</a>
  <a href="/t20-streams">T20 Streams</a>
  <a href="https://cricwatch.io/t20-streams">T20 Streams (dup)</a>
  <a href="https://elsewhere.test/odi-streams">ODI Streams</a>
</nav>
"""


class TestSlugOf:
    @pytest.mark.parametrize(
        ("url", "slug"),
        [
            ("https://cricwatch.io/world-cup-streams/", "world-cup-streams"),
            ("https://totalsportek.es/football", "football"),
            ("https://totalsportek.es/", "general"),
            ("https://totalsportek.es", "general"),
        ],
    )
    def test_last_path_segment(self, url: str, slug: str) -> None:
        assert slug_of(url) == slug


class TestParseCategories:
    def test_cricwatch_selector_chain(self) -> None:
        cats = parse_categories(_CRICWATCH_HOME, "https://cricwatch.io/", CRICWATCH.heuristics)

        assert cats == [
            Category(
                name="World Cup Streams",
                slug="world-cup-streams",
                url="https://cricwatch.io/world-cup-streams/",
            ),
            Category(name="T20 Streams", slug="t20-streams", url="https://cricwatch.io/t20-streams"),
        ]

    def test_totalsportek_filters_non_sports_nav(self) -> None:
        html = """
        <nav>
          <a href="/football">Football</a>
          <a href="/contact-us">Contact</a>
          <a href="/about">About us</a>
          <a href="/nba">NBA</a>
        </nav>
        """
        cats = parse_categories(html, "https://totalsportek.es/", TOTALSPORTEK.heuristics)

        assert [c.slug for c in cats] == ["football", "nba"]

    def test_keyword_fallback_when_selectors_find_nothing(self) -> None:
        html = """
        <div>
          <a href="https://cricwatch.io/cricket-news">Cricket News</a>
          <a href="https://other.test/cricket">Cricket Elsewhere</a>
          <a href="https://cricwatch.io/privacy">Privacy</a>
        </div>
        """
        cats = parse_categories(html, "https://cricwatch.io/", CRICWATCH.heuristics)

        assert cats == [
            Category(name="Cricket News", slug="cricket-news", url="https://cricwatch.io/cricket-news")
        ]

    def test_empty_page(self) -> None:
        assert parse_categories("", "https://cricwatch.io/", CRICWATCH.heuristics) == []


class TestParseEvents:
    def test_cricwatch_events_deduplicated(self) -> None:
        html = """
        <a class="match-item" href="/match/ind-vs-aus"><h3>India vs Australia</h3></a>
        <a class="match-item" href="/match/eng-vs-nz"><span class="title">England vs New Zealand</span></a>
        <a href="/match/ind-vs-aus">India vs Australia again</a>
        <a href="/">Home</a>
        """
        events = parse_events(html, "https://cricwatch.io/t20-streams", CRICWATCH.heuristics)

        assert [(e.title, e.url) for e in events] == [
            ("India vs Australia", "https://cricwatch.io/match/ind-vs-aus"),
            ("England vs New Zealand", "https://cricwatch.io/match/eng-vs-nz"),
        ]

    def test_title_bounds_and_exclusions(self) -> None:
        html = """
        <a class="event-item" href="/e/1">Abc</a>
        <a class="event-item" href="/e/2">Home of football</a>
        <a class="event-item" href="/e/3">Arsenal v Chelsea</a>
        """
        events = parse_events(html, "https://totalsportek.es/football", TOTALSPORTEK.heuristics)

        assert [e.title for e in events] == ["Arsenal v Chelsea"]

    def test_candidate_links_attached(self) -> None:
        heuristics = SportsHeuristics(
            host="sports.test",
            event_selectors=(".card",),
            link_selectors=('a[href*="/link/"]',),
        )
        html = """
        <div class="card">
          <a href="/event/final"><span class="title">Cup Final</span></a>
          <a href="/link/1">HD</a>
          <a href="/link/2"></a>
          <a href="https://cdn.other/link/3">Elsewhere</a>
        </div>
        """
        (event,) = parse_events(html, "https://sports.test/", heuristics)

        assert event.url == "https://sports.test/event/final"
        assert event.title == "Cup Final"
        assert event.candidate_links == (
            EventLink(name="HD", url="https://sports.test/link/1"),
            EventLink(name="Link 2", url="https://sports.test/link/2"),
        )

    def test_keyword_fallback(self) -> None:
        html = """
        <a href="https://cricwatch.io/p/123">Watch England v India live now</a>
        <a href="https://cricwatch.io/p/1">Live</a>
        <a href="https://cricwatch.io/p/2">Scorecard archive</a>
        """
        events = parse_events(html, "https://cricwatch.io/", CRICWATCH.heuristics)

        assert [e.url for e in events] == ["https://cricwatch.io/p/123"]


class TestSportsExtractor:
    async def test_list_categories_loads_home_page(self, session_factory, make_page) -> None:
        session_factory.pages["https://cricwatch.io"] = make_page(
            html=_CRICWATCH_HOME, final_url="https://cricwatch.io/"
        )
        extractor = SportsExtractor(session_factory, navigation_timeout_ms=1000)

        cats = await extractor.list_categories(CRICWATCH)

        assert [c.slug for c in cats] == ["world-cup-streams", "t20-streams"]
        (session,) = session_factory.sessions
        assert session.navigations == ["https://cricwatch.io"]
        assert session.context.referer == "https://cricwatch.io/"
        assert session.closed

    async def test_list_events_resolves_against_final_url(
        self, session_factory, make_page
    ) -> None:
        session_factory.pages["https://cricwatch.io/t20"] = make_page(
            html='<a class="match-item" href="match/a-vs-b"><h3>Team A vs Team B</h3></a>',
            final_url="https://cricwatch.io/t20-streams/",
        )
        extractor = SportsExtractor(session_factory)

        events = await extractor.list_events(CRICWATCH, "https://cricwatch.io/t20")

        assert [e.url for e in events] == ["https://cricwatch.io/t20-streams/match/a-vs-b"]

    async def test_custom_user_agent(self, session_factory) -> None:
        extractor = SportsExtractor(session_factory, user_agent="TestAgent/1.0")

        await extractor.list_categories(TOTALSPORTEK)

        assert session_factory.sessions[0].context.user_agent == "TestAgent/1.0"

    async def test_provider_without_heuristics(self, session_factory) -> None:
        extractor = SportsExtractor(session_factory)

        with pytest.raises(ValueError, match="no sports heuristics"):
            await extractor.list_categories(VIDLINK)
        assert session_factory.sessions == []
