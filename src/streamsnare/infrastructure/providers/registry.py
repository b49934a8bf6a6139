"""Immutable provider registry and upstream URL resolution."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

import structlog

from streamsnare.domain.entities.media import MediaRequest
from streamsnare.domain.entities.provider import Provider, ProviderKind
from streamsnare.domain.errors import UnknownProvider

from .builtin import BUILTIN_PROVIDERS

log = structlog.get_logger(__name__)


class ProviderRegistry:
    """Read-only lookup of providers by id.

    Built once at startup; duplicate ids are rejected so a later
    definition can never silently shadow an earlier one.
    """

    def __init__(self, providers: Iterable[Provider] = BUILTIN_PROVIDERS) -> None:
        by_id: dict[str, Provider] = {}
        for provider in providers:
            if provider.id in by_id:
                raise ValueError(f"Duplicate provider id: {provider.id!r}")
            by_id[provider.id] = provider
        self._providers: Mapping[str, Provider] = MappingProxyType(by_id)
        log.debug("provider_registry_built", providers=list(by_id))

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    def list_ids(self, kind: ProviderKind | None = None) -> list[str]:
        return [p.id for p in self._providers.values() if kind is None or p.kind == kind]

    def get(self, provider_id: str, *, kind: ProviderKind | None = None) -> Provider:
        """Return the provider registered under ``provider_id``.

        Raises:
            UnknownProvider: if no such provider exists, or it is not of
                the requested ``kind``.
        """
        provider = self._providers.get((provider_id or "").strip().lower())
        if provider is None or (kind is not None and provider.kind != kind):
            raise UnknownProvider(provider_id, self.list_ids(kind))
        return provider


def build_upstream_url(provider: Provider, request: MediaRequest) -> str:
    """Deterministically map ``request`` to the provider's upstream page URL.

    Pure: validates, checks the (provider, kind) pair, then builds. No
    browser work happens before these checks pass.

    Raises:
        MissingField: the request lacks fields required by its kind.
        UnsupportedCombination: the provider does not serve this kind.
    """
    return provider.upstream_url(request)
