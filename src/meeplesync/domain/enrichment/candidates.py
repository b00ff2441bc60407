"""Value objects exchanged between source adapters and the merge resolver."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from meeplesync.domain.model import EnrichableField, Source

if TYPE_CHECKING:
    from meeplesync.domain.enrichment.errors import AdapterError


@dataclass(frozen=True, slots=True)
class IdentityHints:
    """Whatever a source needs to locate an entry.

    Most sources key on ``bgg_id``; name, year and designers serve sources that have to
    search. ``wikipedia_url`` is set when an article is already known.
    """

    bgg_id: int | None = None
    name: str | None = None
    year: int | None = None
    designers: tuple[str, ...] = ()
    wikipedia_url: str | None = None


@dataclass(frozen=True, slots=True)
class FieldClaim:
    """A source's opinion on one field.

    ``value=None`` is only meaningful with ``confident=True``: the source asserts the field
    should be cleared. Unconfident empty claims are dropped at the adapter boundary.
    """

    value: str | None
    confident: bool = False


@dataclass(frozen=True, slots=True)
class SequelLink:
    bgg_id: int
    label: str | None = None


@dataclass(frozen=True, slots=True)
class SeriesRef:
    series_id: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class PrimaryRecord:
    """Identity anchor fetched from the primary catalog before any enrichment.

    ``series_families`` holds only the game-series families, with their prefix removed.
    """

    bgg_id: int
    name: str
    kind: str = "boardgame"
    alternate_names: tuple[str, ...] = ()
    year_published: int | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    designers: tuple[str, ...] = ()
    publishers: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    mechanics: tuple[str, ...] = ()
    series_families: tuple[str, ...] = ()

    def hints(self, *, wikipedia_url: str | None = None) -> IdentityHints:
        return IdentityHints(
            bgg_id=self.bgg_id,
            name=self.name,
            year=self.year_published,
            designers=self.designers,
            wikipedia_url=wikipedia_url,
        )


def _frozen_claims(
    claims: Mapping[EnrichableField, FieldClaim],
) -> Mapping[EnrichableField, FieldClaim]:
    return MappingProxyType(dict(claims))


@dataclass(frozen=True, slots=True)
class EnrichmentCandidate:
    """One adapter call's proposal for one entry.

    ``claims`` is sparse: a missing key means the source had no opinion, not that the field
    is empty.
    """

    source: Source
    claims: Mapping[EnrichableField, FieldClaim] = field(default_factory=dict)
    follows: tuple[SequelLink, ...] = ()
    followed_by: tuple[SequelLink, ...] = ()
    series: tuple[SeriesRef, ...] = ()
    wikidata_id: str | None = None
    error: AdapterError | None = None
    elapsed_seconds: float = 0.0
    dropped_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "claims", _frozen_claims(self.claims))

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return not (self.claims or self.follows or self.followed_by or self.series)

    def claim(self, name: EnrichableField) -> FieldClaim | None:
        return self.claims.get(name)

    def with_elapsed(self, elapsed_seconds: float) -> EnrichmentCandidate:
        return replace(self, elapsed_seconds=elapsed_seconds)

    @classmethod
    def failure(cls, error: AdapterError, *, elapsed_seconds: float = 0.0) -> EnrichmentCandidate:
        return cls(source=error.source, error=error, elapsed_seconds=elapsed_seconds)


def claims_from_values(
    values: Mapping[EnrichableField, str | None],
) -> dict[EnrichableField, FieldClaim]:
    """Build claims from plain values, dropping empty ones (no opinion)."""

    claims: dict[EnrichableField, FieldClaim] = {}
    for name, value in values.items():
        if value is None:
            continue
        cleaned = value.strip()
        if cleaned:
            claims[name] = FieldClaim(cleaned)
    return claims
