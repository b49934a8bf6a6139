"""Sports listing entities (categories, events, crawl results)."""

from __future__ import annotations

from dataclasses import dataclass

from streamsnare.domain.entities.streams import StreamCandidate


@dataclass(frozen=True)
class Category:
    """A sports category on a provider's listing page. Unique by ``url``."""

    name: str
    slug: str
    url: str


@dataclass(frozen=True)
class EventLink:
    """A "Link 1"/"Link 2" style candidate link attached to an event."""

    name: str
    url: str


@dataclass(frozen=True)
class Event:
    """A match/event on a category page. Unique by ``url``."""

    title: str
    url: str
    candidate_links: tuple[EventLink, ...] = ()


@dataclass(frozen=True)
class EventStreams:
    """An event with the stream candidates extracted from its page."""

    event: Event
    streams: tuple[StreamCandidate, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class CategoryEvents:
    """One row of a full crawl: a category with its events and streams."""

    category: Category
    events: tuple[EventStreams, ...] = ()
    error: str | None = None
