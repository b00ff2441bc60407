"""Translate SPARQL result rows into an enrichment candidate."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from meeplesync.domain.enrichment.candidates import (
    EnrichmentCandidate,
    FieldClaim,
    SequelLink,
    SeriesRef,
    claims_from_values,
)
from meeplesync.domain.model import EnrichableField, Source

if TYPE_CHECKING:
    from collections.abc import Sequence

    from meeplesync.domain.enrichment.candidates import IdentityHints

type Row = dict[str, str]

_URL_FIELDS = {
    EnrichableField.OFFICIAL_URL: "website",
    EnrichableField.RULEBOOK_URL: "rulebook",
    EnrichableField.COVER_IMAGE_URL: "image",
    EnrichableField.WIKIPEDIA_URL: "wikipediaArticle",
}

# Fields whose property Wikidata can state as explicitly having no value.
_NO_VALUE_FLAGS = {
    EnrichableField.OFFICIAL_URL: "noWebsite",
    EnrichableField.RULEBOOK_URL: "noRulebook",
}


def entity_id(uri: str) -> str:
    """``http://www.wikidata.org/entity/Q42`` -> ``Q42``."""

    return uri.rstrip("/").rsplit("/", 1)[-1]


def normalise_url(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if value.startswith("http://"):
        return "https://" + value.removeprefix("http://")
    return value if value.startswith("https://") else None


def select_game(rows: Sequence[Row], hints: IdentityHints) -> list[Row]:
    """Pick the rows of the single item that best matches the hints."""

    by_game: dict[str, list[Row]] = defaultdict(list)
    for row in rows:
        if "game" in row:
            by_game[entity_id(row["game"])].append(row)
    if not by_game:
        return []

    def rank(qid: str) -> tuple[int, int, int]:
        game_rows = by_game[qid]
        bgg_match = hints.bgg_id is not None and any(
            row.get("bggId") == str(hints.bgg_id) for row in game_rows
        )
        year_match = hints.year is not None and any(
            _year_close(row.get("inceptionYear"), hints.year) for row in game_rows
        )
        numeric = int(qid[1:]) if qid[1:].isdigit() else 0
        return (0 if bgg_match else 1, 0 if year_match else 1, numeric)

    return by_game[min(by_game, key=rank)]


def reject_by_year(rows: Sequence[Row], year: int | None) -> bool:
    """A label match whose inception year is known and too far off is a different game."""

    if year is None:
        return False
    years = {row["inceptionYear"] for row in rows if row.get("inceptionYear")}
    return bool(years) and not any(_year_close(value, year) for value in years)


def translate_rows(rows: Sequence[Row], *, bgg_id: int | None) -> EnrichmentCandidate:
    dropped: list[str] = []
    values: dict[EnrichableField, str | None] = {
        EnrichableField.TAGLINE: _first(rows, "gameDescription"),
    }
    for field, key in _URL_FIELDS.items():
        raw = _first(rows, key)
        url = normalise_url(raw)
        if raw is not None and url is None:
            dropped.append(field.value)
        values[field] = url

    follows, bad_follows = _links(rows, "follows", exclude=bgg_id)
    followed_by, bad_followed_by = _links(rows, "followedBy", exclude=bgg_id)
    if bad_follows:
        dropped.append("follows")
    if bad_followed_by:
        dropped.append("followed_by")

    series = tuple(
        sorted(
            {
                SeriesRef(entity_id(row["series"]), row.get("seriesLabel"))
                for row in rows
                if row.get("series")
            },
            key=lambda ref: (ref.series_id, ref.label or ""),
        )
    )

    claims = claims_from_values(values)
    for field, flag in _NO_VALUE_FLAGS.items():
        if field not in claims and any(row.get(flag) for row in rows):
            claims[field] = FieldClaim(None, confident=True)

    return EnrichmentCandidate(
        source=Source.WIKIDATA,
        claims=claims,
        follows=follows,
        followed_by=followed_by,
        series=series,
        wikidata_id=entity_id(rows[0]["game"]) if rows else None,
        dropped_fields=tuple(dropped),
    )


def _first(rows: Sequence[Row], key: str) -> str | None:
    values = sorted({row[key].strip() for row in rows if row.get(key, "").strip()})
    return values[0] if values else None


def _links(
    rows: Sequence[Row],
    prefix: str,
    *,
    exclude: int | None,
) -> tuple[tuple[SequelLink, ...], bool]:
    links: set[SequelLink] = set()
    malformed = False
    for row in rows:
        if not row.get(prefix):
            continue
        raw_id = row.get(f"{prefix}BggId")
        if raw_id is None:
            # linked item has no BGG ID; relations are keyed by it
            continue
        if not raw_id.strip().isdigit():
            malformed = True
            continue
        linked = int(raw_id)
        if linked != exclude:
            links.add(SequelLink(linked, row.get(f"{prefix}Label")))
    ordered = sorted(links, key=lambda link: (link.bgg_id, link.label or ""))
    return tuple(ordered), malformed


def _year_close(value: str | None, year: int) -> bool:
    if value is None or not value.lstrip("-").isdigit():
        return False
    return abs(int(value) - year) <= 1
