"""Translate BGG items into primary records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from meeplesync.domain.enrichment.candidates import PrimaryRecord

if TYPE_CHECKING:
    from .schema import BggItem

# BGG families also cover themes and components; only these name a game series.
SERIES_FAMILY_PREFIXES = ("Game:", "Series:")


def translate_item(item: BggItem) -> PrimaryRecord:
    name = item.primary_name
    if name is None:
        msg = f"BGG item {item.id} has no name"
        raise ValueError(msg)

    return PrimaryRecord(
        bgg_id=item.id,
        name=name,
        kind=item.type,
        alternate_names=tuple(item.alternate_names),
        year_published=item.year_published,
        description=item.description,
        image_url=item.image,
        thumbnail_url=item.thumbnail,
        designers=_values(item, "boardgamedesigner"),
        publishers=_values(item, "boardgamepublisher"),
        categories=_values(item, "boardgamecategory"),
        mechanics=_values(item, "boardgamemechanic"),
        series_families=series_family_names(_values(item, "boardgamefamily")),
    )


def series_family_names(families: tuple[str, ...]) -> tuple[str, ...]:
    """``("Series: Gloomhaven", "Theme: Fantasy")`` -> ``("Gloomhaven",)``."""

    names: list[str] = []
    for family in families:
        for prefix in SERIES_FAMILY_PREFIXES:
            if family.startswith(prefix):
                cleaned = family.removeprefix(prefix).strip()
                if cleaned and cleaned not in names:
                    names.append(cleaned)
                break
    return tuple(names)


def _values(item: BggItem, link_type: str) -> tuple[str, ...]:
    return tuple(link.value for link in item.links_of(link_type))
