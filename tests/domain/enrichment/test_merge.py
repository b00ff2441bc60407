from __future__ import annotations

from itertools import permutations

from meeplesync.domain.enrichment import (
    EnrichmentCandidate,
    FailureKind,
    NotFoundError,
    SequelLink,
    SeriesRef,
    TransientError,
    encyclopedia_fallback_url,
    index_candidates,
    merge_enrichment,
)
from meeplesync.domain.model import EnrichableField, Source
from tests.helpers.catalog import candidate, make_record

WIKI_URL = "https://en.wikipedia.org/wiki/Gloomhaven"


def test_tagline_prefers_knowledge_graph_and_description_prefers_encyclopedia() -> None:
    wikidata = candidate(
        Source.WIKIDATA,
        {
            EnrichableField.TAGLINE: "2017 board game",
            EnrichableField.DESCRIPTION: "short label",
        },
    )
    wikipedia = candidate(
        Source.WIKIPEDIA,
        {
            EnrichableField.TAGLINE: "Gloomhaven is a cooperative board game.",
            EnrichableField.DESCRIPTION: "Gloomhaven is a cooperative board game. It has...",
        },
    )

    merged = merge_enrichment(make_record(), [wikipedia, wikidata])

    assert merged.value(EnrichableField.TAGLINE) == "2017 board game"
    assert merged.value(EnrichableField.DESCRIPTION) == (
        "Gloomhaven is a cooperative board game. It has..."
    )
    assert merged.provenance() == {
        EnrichableField.TAGLINE: Source.WIKIDATA,
        EnrichableField.DESCRIPTION: Source.WIKIPEDIA,
    }


def test_failed_sources_fall_through_to_the_next_in_precedence() -> None:
    commons = EnrichmentCandidate.failure(TransientError(Source.COMMONS, "HTTP 503"))
    wikipedia = candidate(Source.WIKIPEDIA, {EnrichableField.COVER_IMAGE_URL: "https://w/c.jpg"})
    wikidata = candidate(Source.WIKIDATA, {EnrichableField.COVER_IMAGE_URL: "https://d/c.jpg"})

    merged = merge_enrichment(make_record(), [commons, wikidata, wikipedia])

    resolution = merged.resolution(EnrichableField.COVER_IMAGE_URL)
    assert resolution is not None
    assert resolution.value == "https://w/c.jpg"
    assert resolution.source is Source.WIKIPEDIA
    assert merged.failures == ((Source.COMMONS, FailureKind.TRANSIENT),)
    assert merged.succeeded_sources == (Source.WIKIDATA, Source.WIKIPEDIA)


def test_confident_null_only_wins_when_no_source_has_a_value() -> None:
    clearing = candidate(Source.WIKIDATA, {EnrichableField.OFFICIAL_URL: None})
    merged = merge_enrichment(make_record(), [clearing])

    resolution = merged.resolution(EnrichableField.OFFICIAL_URL)
    assert resolution is not None
    assert resolution.clears
    assert resolution.confident

    clearing_tagline = candidate(Source.WIKIDATA, {EnrichableField.TAGLINE: None})
    valued = candidate(Source.WIKIPEDIA, {EnrichableField.TAGLINE: "A dungeon crawler."})
    merged = merge_enrichment(make_record(), [clearing_tagline, valued])

    assert merged.value(EnrichableField.TAGLINE) == "A dungeon crawler."


def test_fields_without_claims_are_left_unresolved() -> None:
    merged = merge_enrichment(
        make_record(),
        [candidate(Source.YOUTUBE, {EnrichableField.VIDEO_URL: "https://youtu.be/x"})],
    )

    assert [resolution.field for resolution in merged.resolutions] == [EnrichableField.VIDEO_URL]
    assert merged.resolution(EnrichableField.DESCRIPTION) is None


def test_relations_come_from_the_knowledge_graph_only() -> None:
    wikidata = candidate(
        Source.WIKIDATA,
        follows=[SequelLink(174430, "Gloomhaven"), SequelLink(1, None)],
        followed_by=[
            SequelLink(295770, "Frosthaven"),
            SequelLink(295770, None),
            SequelLink(295770, "Frosthaven"),
        ],
        wikidata_id="Q28009932",
    )
    wikipedia = candidate(Source.WIKIPEDIA, followed_by=[SequelLink(999, "Noise")])

    merged = merge_enrichment(make_record(), [wikidata, wikipedia])

    assert merged.follows == (SequelLink(1, None),)
    assert merged.followed_by == (SequelLink(295770, "Frosthaven"),)
    assert merged.wikidata_id == "Q28009932"


def test_series_refs_are_deduplicated() -> None:
    wikidata = EnrichmentCandidate(
        source=Source.WIKIDATA,
        series=(SeriesRef("Q2", None), SeriesRef("Q1", "Gloom"), SeriesRef("Q2", "Haven")),
    )

    merged = merge_enrichment(make_record(), [wikidata])

    assert merged.series == (SeriesRef("Q1", "Gloom"), SeriesRef("Q2", "Haven"))


def test_all_sources_failing_is_degraded() -> None:
    failures = [
        EnrichmentCandidate.failure(NotFoundError(source, "nothing"))
        for source in (Source.WIKIDATA, Source.WIKIPEDIA)
    ]

    merged = merge_enrichment(make_record(), failures)

    assert merged.degraded
    assert merged.resolutions == ()
    assert merged.failures == (
        (Source.WIKIDATA, FailureKind.NOT_FOUND),
        (Source.WIKIPEDIA, FailureKind.NOT_FOUND),
    )


def test_index_prefers_success_over_later_failure() -> None:
    success = candidate(Source.WIKIPEDIA, {EnrichableField.DESCRIPTION: "text"})
    failure = EnrichmentCandidate.failure(TransientError(Source.WIKIPEDIA, "late"))

    assert index_candidates([success, failure])[Source.WIKIPEDIA] is success
    assert index_candidates([failure, success])[Source.WIKIPEDIA] is success


def test_fallback_url_when_encyclopedia_failed_or_was_empty() -> None:
    wikidata = candidate(Source.WIKIDATA, {EnrichableField.WIKIPEDIA_URL: WIKI_URL})
    failed = EnrichmentCandidate.failure(NotFoundError(Source.WIKIPEDIA, "no match"))
    empty = candidate(Source.WIKIPEDIA)
    found = candidate(Source.WIKIPEDIA, {EnrichableField.DESCRIPTION: "text"})

    assert encyclopedia_fallback_url([wikidata, failed]) == WIKI_URL
    assert encyclopedia_fallback_url([wikidata, empty]) == WIKI_URL
    assert encyclopedia_fallback_url([wikidata]) == WIKI_URL
    assert encyclopedia_fallback_url([wikidata, found]) is None
    assert encyclopedia_fallback_url([failed]) is None


def test_merge_result_does_not_depend_on_candidate_order() -> None:
    wikidata = candidate(
        Source.WIKIDATA,
        {
            EnrichableField.TAGLINE: "2017 board game",
            EnrichableField.OFFICIAL_URL: None,
            EnrichableField.WIKIPEDIA_URL: WIKI_URL,
        },
        followed_by=[SequelLink(295770, "Frosthaven")],
        wikidata_id="Q28009932",
    )
    wikipedia_failed = EnrichmentCandidate.failure(NotFoundError(Source.WIKIPEDIA, "no match"))
    wikipedia_fallback = candidate(
        Source.WIKIPEDIA,
        {
            EnrichableField.TAGLINE: "Gloomhaven is a cooperative board game.",
            EnrichableField.DESCRIPTION: "Gloomhaven is a cooperative board game. It has...",
            EnrichableField.COVER_IMAGE_URL: "https://w/c.jpg",
        },
    )
    commons = EnrichmentCandidate.failure(TransientError(Source.COMMONS, "HTTP 503"))
    youtube = candidate(Source.YOUTUBE, {EnrichableField.VIDEO_URL: "https://youtu.be/x"})

    candidates = [wikidata, wikipedia_failed, wikipedia_fallback, commons, youtube]
    results = [merge_enrichment(make_record(), list(order)) for order in permutations(candidates)]

    merged = results[0]
    assert all(result == merged for result in results)
    assert merged.value(EnrichableField.TAGLINE) == "2017 board game"
    assert merged.value(EnrichableField.COVER_IMAGE_URL) == "https://w/c.jpg"
    official = merged.resolution(EnrichableField.OFFICIAL_URL)
    assert official is not None
    assert official.clears
    assert merged.failures == ((Source.COMMONS, FailureKind.TRANSIENT),)
    assert merged.succeeded_sources == (Source.WIKIDATA, Source.WIKIPEDIA, Source.YOUTUBE)
