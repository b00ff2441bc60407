"""Filtering and ranking of Commons files as cover and hero images."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, claims_from_values
from meeplesync.domain.model import EnrichableField, Source

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .schema import FilePage

EXCLUDED_PATTERNS: Final = (
    "icon",
    "logo",
    "symbol",
    "flag of",
    "wiki",
    "pictogram",
    "stub",
    "disambig",
    "ambox",
    "padlock",
    "edit-clear",
    "question_book",
    "nuvola",
    "gnome-",
    "gtk-",
    "emblem-",
    "button",
    "arrow",
    "portal",
)

PRIMARY_PATTERNS: Final = (
    "box",
    "cover",
    "packaging",
    "game_box",
    "board_game",
    "boardgame",
    "edition",
    "components",
    "board",
)

_MIN_SIDE = 500
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class CommonsImage:
    title: str
    url: str
    display_url: str
    width: int
    height: int

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


def search_query(name: str) -> str:
    return f"{name} board game"


def is_excluded(title: str) -> bool:
    lowered = title.casefold()
    if lowered.endswith(".svg"):
        return True
    return any(pattern in lowered for pattern in EXCLUDED_PATTERNS)


def images_from_pages(pages: Iterable[FilePage]) -> list[CommonsImage]:
    images: list[CommonsImage] = []
    for page in pages:
        if page.missing or not page.imageinfo:
            continue
        info = page.imageinfo[0]
        images.append(
            CommonsImage(
                title=page.title,
                url=info.url,
                display_url=info.thumb_url or info.url,
                width=info.width,
                height=info.height,
            )
        )
    return images


def score_image(image: CommonsImage, name: str) -> int:
    title = image.title.casefold()
    score = 2 * sum(1 for pattern in PRIMARY_PATTERNS if pattern in title)
    lowered = name.casefold().strip()
    if _WHITESPACE.sub("_", lowered) in title:
        score += 3
    if _WHITESPACE.sub("-", lowered) in title:
        score += 3
    if image.width >= _MIN_SIDE and image.height >= _MIN_SIDE:
        score += 1
    if title.endswith((".jpg", ".png")):
        score += 1
    return score


def pick_images(
    images: Sequence[CommonsImage],
    name: str,
) -> tuple[CommonsImage | None, CommonsImage | None]:
    """Return ``(cover, hero)``.

    The cover is the best-scoring file (first one on ties). The hero is the largest remaining
    landscape file, if any.
    """

    if not images:
        return None, None
    cover = max(images, key=lambda image: score_image(image, name))
    landscapes = [image for image in images if image is not cover and image.is_landscape]
    hero = max(landscapes, key=lambda image: image.width * image.height, default=None)
    return cover, hero


def translate_images(images: Sequence[CommonsImage], name: str) -> EnrichmentCandidate:
    cover, hero = pick_images(images, name)
    values = {
        EnrichableField.COVER_IMAGE_URL: cover.display_url if cover else None,
        EnrichableField.HERO_IMAGE_URL: hero.display_url if hero else None,
    }
    return EnrichmentCandidate(source=Source.COMMONS, claims=claims_from_values(values))
