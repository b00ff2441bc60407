from __future__ import annotations

from dataclasses import replace

from meeplesync.domain.enrichment import FieldResolution, MergedEnrichment, SequelLink
from meeplesync.domain.model import (
    CatalogEntry,
    EnrichableField,
    RelationKind,
    SequelRelation,
    Source,
)
from meeplesync.domain.sync import apply_merged, apply_primary_record, sequel_relations
from tests.helpers.catalog import make_record


def test_apply_primary_record_sets_identity_and_taxonomy() -> None:
    entry = CatalogEntry(bgg_id=174430)

    changed = apply_primary_record(entry, make_record())

    assert entry.name == "Gloomhaven"
    assert entry.year_published == 2017
    assert entry.category_slugs == ["thematic"]
    assert entry.theme_slugs == ["fantasy"]
    assert entry.publishers == ["Cephalofair Games"]
    assert entry.series_families == ["Gloomhaven"]
    assert not entry.is_expansion
    assert "name" in changed
    assert apply_primary_record(entry, make_record()) == []


def test_apply_primary_record_marks_expansions() -> None:
    entry = CatalogEntry(bgg_id=226868)
    record = replace(
        make_record(226868, "Gloomhaven: Forgotten Circles"),
        kind="boardgameexpansion",
        alternate_names=("Gloomhaven: Die vergessenen Zirkel",),
    )

    changed = apply_primary_record(entry, record)

    assert entry.is_expansion
    assert entry.alternate_names == ["Gloomhaven: Die vergessenen Zirkel"]
    assert {"kind", "alternate_names"} <= set(changed)


def test_apply_merged_keeps_stored_values_for_unresolved_fields() -> None:
    entry = CatalogEntry(bgg_id=174430, description="Kept", tagline="Old")
    merged = MergedEnrichment(
        bgg_id=174430,
        resolutions=(FieldResolution(EnrichableField.TAGLINE, "New", Source.WIKIDATA),),
        wikidata_id="Q28009932",
        any_source_succeeded=True,
    )

    changed = apply_merged(entry, merged)

    assert changed == ["tagline", "wikidata_id"]
    assert entry.tagline == "New"
    assert entry.description == "Kept"


def test_apply_merged_clears_only_on_confident_null() -> None:
    entry = CatalogEntry(bgg_id=1, official_url="https://old", video_url="https://v")
    merged = MergedEnrichment(
        bgg_id=1,
        resolutions=(
            FieldResolution(EnrichableField.OFFICIAL_URL, None, Source.WIKIDATA, confident=True),
            FieldResolution(EnrichableField.VIDEO_URL, None, Source.YOUTUBE),
        ),
    )

    changed = apply_merged(entry, merged)

    assert changed == ["official_url"]
    assert entry.official_url is None
    assert entry.video_url == "https://v"


def test_sequel_relations_cover_both_directions() -> None:
    merged = MergedEnrichment(
        bgg_id=174430,
        follows=(SequelLink(1, "Prequel"),),
        followed_by=(SequelLink(295770, "Frosthaven"),),
    )

    relations = sequel_relations(174430, "Gloomhaven", merged)

    assert relations == [
        SequelRelation(174430, RelationKind.FOLLOWS, 1, "Prequel"),
        SequelRelation(1, RelationKind.PRECEDES, 174430, "Gloomhaven"),
        SequelRelation(174430, RelationKind.PRECEDES, 295770, "Frosthaven"),
        SequelRelation(295770, RelationKind.FOLLOWS, 174430, "Gloomhaven"),
    ]
