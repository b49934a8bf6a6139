"""Media request value objects.

Pure value objects -- no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit

from streamsnare.domain.errors import MissingField

MediaKind = Literal["movie", "tv", "anime", "sports-event"]
SubOrDub = Literal["sub", "dub"]

MEDIA_KINDS: tuple[MediaKind, ...] = ("movie", "tv", "anime", "sports-event")

_REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "movie": ("tmdb_id",),
    "tv": ("tmdb_id", "season", "episode"),
    "anime": ("mal_id", "episode_number", "sub_or_dub"),
    "sports-event": ("event_url",),
}


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class MediaRequest:
    """A logical media request, discriminated by ``kind``.

    Field values are kept as strings; ``sub_or_dub`` is lower-cased.
    Use the ``movie()``/``tv()``/``anime()``/``sports_event()``
    constructors, which normalise and validate.
    """

    kind: MediaKind
    tmdb_id: str | None = None
    season: str | None = None
    episode: str | None = None
    mal_id: str | None = None
    episode_number: str | None = None
    sub_or_dub: str | None = None
    event_url: str | None = None

    @classmethod
    def movie(cls, tmdb_id: object) -> MediaRequest:
        return cls(kind="movie", tmdb_id=_clean(tmdb_id)).validate()

    @classmethod
    def tv(cls, tmdb_id: object, season: object, episode: object) -> MediaRequest:
        return cls(
            kind="tv",
            tmdb_id=_clean(tmdb_id),
            season=_clean(season),
            episode=_clean(episode),
        ).validate()

    @classmethod
    def anime(
        cls, mal_id: object, episode_number: object, sub_or_dub: object
    ) -> MediaRequest:
        sod = _clean(sub_or_dub)
        return cls(
            kind="anime",
            mal_id=_clean(mal_id),
            episode_number=_clean(episode_number),
            sub_or_dub=sod.lower() if sod else None,
        ).validate()

    @classmethod
    def sports_event(cls, event_url: object) -> MediaRequest:
        return cls(kind="sports-event", event_url=_clean(event_url)).validate()

    @classmethod
    def from_params(cls, kind: str, **params: object) -> MediaRequest:
        """Build a request from loosely-typed parameters (e.g. query strings)."""
        normalized = (kind or "").strip().lower()
        if normalized == "movie":
            return cls.movie(params.get("tmdb_id"))
        if normalized == "tv":
            return cls.tv(
                params.get("tmdb_id"), params.get("season"), params.get("episode")
            )
        if normalized == "anime":
            return cls.anime(
                params.get("mal_id"),
                params.get("episode_number"),
                params.get("sub_or_dub"),
            )
        if normalized == "sports-event":
            return cls.sports_event(params.get("event_url"))
        raise MissingField(
            ["type"],
            message=(
                'Parameter "type" is required and must be one of: '
                + ", ".join(MEDIA_KINDS)
                + "."
            ),
        )

    def validate(self) -> MediaRequest:
        """Return ``self`` if all required fields for ``kind`` are present.

        Raises:
            MissingField: naming every missing field, or an invalid
                ``sub_or_dub`` / ``event_url`` value.
        """
        required = _REQUIRED_FIELDS.get(self.kind)
        if required is None:
            raise MissingField(["kind"], message=f"Unknown media kind {self.kind!r}.")

        missing = [name for name in required if not getattr(self, name)]
        if missing:
            raise MissingField(
                missing,
                message=(
                    f"For type {self.kind!r} you must provide: "
                    + ", ".join(missing)
                    + "."
                ),
            )

        if self.kind == "anime" and self.sub_or_dub not in ("sub", "dub"):
            raise MissingField(
                ["sub_or_dub"],
                message='Parameter "subOrDub" must be either "sub" or "dub".',
            )

        if self.kind == "sports-event":
            parts = urlsplit(self.event_url or "")
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise MissingField(
                    ["event_url"],
                    message="event_url must be an absolute http(s) URL.",
                )
        return self

    def identity(self) -> dict[str, str]:
        """The identifying fields of this request (for fingerprinting)."""
        fields = {"kind": self.kind}
        for name in _REQUIRED_FIELDS[self.kind]:
            fields[name] = str(getattr(self, name))
        return fields
