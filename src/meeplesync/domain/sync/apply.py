"""Writing primary records and merged enrichment onto catalog entries.

These are the only functions that touch an entry's catalog fields. Each returns the names of
the attributes it actually changed, so callers can tell a no-op re-sync from a real update.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from meeplesync.domain.model import RelationKind, SequelRelation, SeriesMembership
from meeplesync.domain.sync.taxonomy import map_categories, map_themes

if TYPE_CHECKING:
    from meeplesync.domain.enrichment.candidates import PrimaryRecord
    from meeplesync.domain.enrichment.merge import MergedEnrichment
    from meeplesync.domain.model import CatalogEntry


def apply_primary_record(entry: CatalogEntry, record: PrimaryRecord) -> list[str]:
    """Copy identity fields and the derived taxonomy from the primary record."""

    values: dict[str, object] = {
        "name": record.name,
        "kind": record.kind,
        "alternate_names": list(record.alternate_names),
        "year_published": record.year_published,
        "designers": list(record.designers),
        "publishers": list(record.publishers),
        "categories": list(record.categories),
        "mechanics": list(record.mechanics),
        "series_families": list(record.series_families),
        "image_url": record.image_url,
        "thumbnail_url": record.thumbnail_url,
        "category_slugs": list(map_categories(record.categories)),
        "theme_slugs": list(map_themes(record.categories)),
    }
    changed: list[str] = []
    for attribute, value in values.items():
        if getattr(entry, attribute) != value:
            setattr(entry, attribute, value)
            changed.append(attribute)
    return changed


def apply_merged(entry: CatalogEntry, merged: MergedEnrichment) -> list[str]:
    """Apply resolved fields without ever losing stored data to an empty result.

    Unresolved fields are left alone. A resolution to null clears the stored value only
    because it is confident; the resolver never emits unconfident nulls.
    """

    changed: list[str] = []
    for resolution in merged.resolutions:
        current = entry.get_field(resolution.field)
        if resolution.clears and not resolution.confident:
            continue
        if current != resolution.value:
            entry.set_field(resolution.field, resolution.value)
            changed.append(resolution.field.value)
    if merged.wikidata_id is not None and entry.wikidata_id != merged.wikidata_id:
        entry.wikidata_id = merged.wikidata_id
        changed.append("wikidata_id")
    return changed


def sequel_relations(
    bgg_id: int,
    name: str | None,
    merged: MergedEnrichment,
) -> list[SequelRelation]:
    """Both directions of every sequel link, ready to be written in one transaction."""

    relations: list[SequelRelation] = []
    for link in merged.follows:
        forward = SequelRelation(bgg_id, RelationKind.FOLLOWS, link.bgg_id, link.label)
        relations.extend((forward, forward.inverse(name)))
    for link in merged.followed_by:
        forward = SequelRelation(bgg_id, RelationKind.PRECEDES, link.bgg_id, link.label)
        relations.extend((forward, forward.inverse(name)))
    return relations


def series_memberships(merged: MergedEnrichment) -> list[SeriesMembership]:
    return [SeriesMembership(ref.series_id, ref.label) for ref in merged.series]
