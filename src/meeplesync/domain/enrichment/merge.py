"""Merge resolution of enrichment candidates.

Pure functions only: given the primary record and whatever candidates the secondary sources
produced, decide one value per enrichable field together with the source that supplied it.
Nothing here reads or writes storage.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from meeplesync.domain.enrichment.candidates import SequelLink, SeriesRef
from meeplesync.domain.enrichment.errors import FailureKind
from meeplesync.domain.model import SECONDARY_SOURCES, EnrichableField, Source

if TYPE_CHECKING:
    from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, PrimaryRecord


FIELD_PRECEDENCE: Final[Mapping[EnrichableField, tuple[Source, ...]]] = MappingProxyType(
    {
        EnrichableField.TAGLINE: (Source.WIKIDATA, Source.WIKIPEDIA),
        EnrichableField.DESCRIPTION: (Source.WIKIPEDIA, Source.WIKIDATA),
        EnrichableField.COVER_IMAGE_URL: (Source.COMMONS, Source.WIKIPEDIA, Source.WIKIDATA),
        EnrichableField.HERO_IMAGE_URL: (Source.COMMONS, Source.WIKIPEDIA, Source.WIKIDATA),
        EnrichableField.WIKIPEDIA_URL: (Source.WIKIPEDIA, Source.WIKIDATA),
        EnrichableField.OFFICIAL_URL: (Source.WIKIDATA,),
        EnrichableField.RULEBOOK_URL: (Source.WIKIDATA, Source.WIKIPEDIA),
        EnrichableField.VIDEO_URL: (Source.YOUTUBE,),
    }
)

# Series, sequel links and the knowledge-graph ID are identity data: one source only.
RELATIONAL_SOURCE: Final[Source] = Source.WIKIDATA


@dataclass(frozen=True, slots=True)
class FieldResolution:
    field: EnrichableField
    value: str | None
    source: Source
    confident: bool = False

    @property
    def clears(self) -> bool:
        return self.value is None


@dataclass(frozen=True, slots=True)
class MergedEnrichment:
    bgg_id: int
    resolutions: tuple[FieldResolution, ...] = ()
    follows: tuple[SequelLink, ...] = ()
    followed_by: tuple[SequelLink, ...] = ()
    series: tuple[SeriesRef, ...] = ()
    wikidata_id: str | None = None
    any_source_succeeded: bool = False
    succeeded_sources: tuple[Source, ...] = ()
    failures: tuple[tuple[Source, FailureKind], ...] = field(default_factory=tuple)

    @property
    def degraded(self) -> bool:
        return not self.any_source_succeeded

    def resolution(self, name: EnrichableField) -> FieldResolution | None:
        for resolution in self.resolutions:
            if resolution.field is name:
                return resolution
        return None

    def value(self, name: EnrichableField) -> str | None:
        resolution = self.resolution(name)
        return resolution.value if resolution is not None else None

    def provenance(self) -> dict[EnrichableField, Source]:
        return {resolution.field: resolution.source for resolution in self.resolutions}


def index_candidates(
    candidates: Iterable[EnrichmentCandidate],
) -> dict[Source, EnrichmentCandidate]:
    """Index candidates by source.

    When a source appears twice (a fallback fetch), a successful candidate beats a failed
    one; between two of the same outcome the later one wins.
    """

    indexed: dict[Source, EnrichmentCandidate] = {}
    for candidate in candidates:
        current = indexed.get(candidate.source)
        if current is not None and current.succeeded and not candidate.succeeded:
            continue
        indexed[candidate.source] = candidate
    return indexed


def encyclopedia_fallback_url(candidates: Iterable[EnrichmentCandidate]) -> str | None:
    """Return the article URL for a targeted encyclopedia fetch, if one is warranted.

    Warranted when the knowledge graph points at an article but the encyclopedia source
    failed or had nothing to say.
    """

    indexed = index_candidates(candidates)
    knowledge_graph = indexed.get(Source.WIKIDATA)
    if knowledge_graph is None or not knowledge_graph.succeeded:
        return None
    claim = knowledge_graph.claim(EnrichableField.WIKIPEDIA_URL)
    if claim is None or claim.value is None:
        return None

    encyclopedia = indexed.get(Source.WIKIPEDIA)
    if encyclopedia is not None and encyclopedia.succeeded and not encyclopedia.is_empty:
        return None
    return claim.value


def merge_enrichment(
    primary: PrimaryRecord,
    candidates: Iterable[EnrichmentCandidate],
) -> MergedEnrichment:
    indexed = index_candidates(candidates)
    succeeded = {
        source: candidate
        for source, candidate in indexed.items()
        if candidate.succeeded and source in SECONDARY_SOURCES
    }
    failures = tuple(
        (source, candidate.error.kind)
        for source, candidate in sorted(indexed.items())
        if candidate.error is not None
    )

    resolutions = tuple(
        resolution
        for name in EnrichableField
        if (resolution := _resolve_field(name, succeeded)) is not None
    )

    relational = succeeded.get(RELATIONAL_SOURCE)
    follows: tuple[SequelLink, ...] = ()
    followed_by: tuple[SequelLink, ...] = ()
    series: tuple[SeriesRef, ...] = ()
    wikidata_id: str | None = None
    if relational is not None:
        follows = _unique_links(relational.follows, exclude=primary.bgg_id)
        followed_by = _unique_links(relational.followed_by, exclude=primary.bgg_id)
        series = _unique_series(relational.series)
        wikidata_id = relational.wikidata_id

    return MergedEnrichment(
        bgg_id=primary.bgg_id,
        resolutions=resolutions,
        follows=follows,
        followed_by=followed_by,
        series=series,
        wikidata_id=wikidata_id,
        any_source_succeeded=bool(succeeded),
        succeeded_sources=tuple(sorted(succeeded)),
        failures=failures,
    )


def _resolve_field(
    name: EnrichableField,
    succeeded: Mapping[Source, EnrichmentCandidate],
) -> FieldResolution | None:
    clearing: FieldResolution | None = None
    for source in FIELD_PRECEDENCE[name]:
        candidate = succeeded.get(source)
        if candidate is None:
            continue
        claim = candidate.claim(name)
        if claim is None:
            continue
        if claim.value is not None:
            return FieldResolution(name, claim.value, source, confident=claim.confident)
        if claim.confident and clearing is None:
            clearing = FieldResolution(name, None, source, confident=True)
    return clearing


def _unique_links(links: Iterable[SequelLink], *, exclude: int) -> tuple[SequelLink, ...]:
    labels: dict[int, set[str]] = {}
    for link in links:
        if link.bgg_id == exclude:
            continue
        bucket = labels.setdefault(link.bgg_id, set())
        if link.label:
            bucket.add(link.label)
    return tuple(
        SequelLink(bgg_id, min(labels[bgg_id]) if labels[bgg_id] else None)
        for bgg_id in sorted(labels)
    )


def _unique_series(refs: Iterable[SeriesRef]) -> tuple[SeriesRef, ...]:
    labels: dict[str, set[str]] = {}
    for ref in refs:
        bucket = labels.setdefault(ref.series_id, set())
        if ref.label:
            bucket.add(ref.label)
    return tuple(
        SeriesRef(series_id, min(labels[series_id]) if labels[series_id] else None)
        for series_id in sorted(labels)
    )
