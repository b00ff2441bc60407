"""Article text cleaning, title selection and rulebook-link detection."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final
from urllib.parse import unquote, urlparse

from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, claims_from_values
from meeplesync.domain.model import EnrichableField, Source

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import WikiPage

SEARCH_SUFFIXES: Final = ("(board game)", "(game)", "(card game)")

_PREFERRED_QUALIFIERS: Final = ("board game", "card game", "tabletop game", "game")
_OTHER_MEDIA: Final = (
    "video game",
    "film",
    "movie",
    "tv series",
    "novel",
    "album",
    "band",
    "disambiguation",
)

_RULEBOOK_PDF_WORDS: Final = ("rule", "manual", "instruction", "how-to-play", "quickstart")
_RULEBOOK_PATHS: Final = (
    "/rules",
    "/rulebook",
    "/manual",
    "/instructions",
    "/how-to-play",
    "/learn-to-play",
    "support/rules",
    "downloads/rules",
)

_EDIT_MARKER = re.compile(r"\[\s*edit\s*\]", re.IGNORECASE)
_CITATION = re.compile(r"\[\s*(?:\d+|citation needed)\s*\]", re.IGNORECASE)
_BLANK_RUN = re.compile(r"\n{3,}")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"'(])")
_QUALIFIER = re.compile(r"^(?P<base>.*?)\s*\((?P<qualifier>[^)]*)\)\s*$")


def clean_extract(text: str | None) -> str | None:
    if text is None:
        return None
    cleaned = text.replace("&#91;", "[").replace("&#93;", "]")
    cleaned = _EDIT_MARKER.sub("", cleaned)
    cleaned = _CITATION.sub("", cleaned)
    cleaned = _BLANK_RUN.sub("\n\n", cleaned).strip()
    return cleaned or None


def first_sentence(text: str | None) -> str | None:
    if not text:
        return None
    paragraph = text.split("\n", 1)[0].strip()
    return _SENTENCE_END.split(paragraph, 1)[0].strip() or None


def title_from_url(url: str) -> str | None:
    path = urlparse(url).path
    if not path.startswith("/wiki/"):
        return None
    title = unquote(path.removeprefix("/wiki/")).replace("_", " ").strip()
    return title or None


def is_likely_board_game_title(title: str) -> bool:
    match = _QUALIFIER.match(title)
    if match is None:
        return True
    qualifier = match.group("qualifier").casefold()
    if qualifier in _PREFERRED_QUALIFIERS:
        return True
    return not any(word in qualifier for word in _OTHER_MEDIA)


def choose_title(name: str, titles: Iterable[str]) -> str | None:
    """Best article title for ``name``: qualified as a game first, then the bare title."""

    wanted = name.casefold().strip()
    ranked: list[tuple[int, str]] = []
    for title in titles:
        if not is_likely_board_game_title(title):
            continue
        match = _QUALIFIER.match(title)
        base = match.group("base") if match else title
        if base.casefold().strip() != wanted:
            continue
        if match is None:
            rank = len(_PREFERRED_QUALIFIERS)
        else:
            qualifier = match.group("qualifier").casefold()
            if qualifier not in _PREFERRED_QUALIFIERS:
                continue
            rank = _PREFERRED_QUALIFIERS.index(qualifier)
        ranked.append((rank, title))
    return min(ranked)[1] if ranked else None


def is_rulebook_link(url: str) -> bool:
    lowered = url.casefold()
    if lowered.endswith(".pdf") and any(word in lowered for word in _RULEBOOK_PDF_WORDS):
        return True
    return any(pattern in lowered for pattern in _RULEBOOK_PATHS)


def translate_page(page: WikiPage) -> EnrichmentCandidate:
    description = clean_extract(page.extract)
    rulebook = next((link.url for link in page.extlinks if is_rulebook_link(link.url)), None)
    if rulebook is not None and rulebook.startswith("//"):
        rulebook = f"https:{rulebook}"
    values = {
        EnrichableField.DESCRIPTION: description,
        EnrichableField.TAGLINE: first_sentence(description),
        EnrichableField.WIKIPEDIA_URL: page.fullurl,
        EnrichableField.COVER_IMAGE_URL: page.original.source if page.original else None,
        EnrichableField.RULEBOOK_URL: rulebook,
    }
    return EnrichmentCandidate(source=Source.WIKIPEDIA, claims=claims_from_values(values))
