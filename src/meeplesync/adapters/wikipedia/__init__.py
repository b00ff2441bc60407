"""English Wikipedia encyclopedia adapter."""

from __future__ import annotations

from .client import WikipediaClient
from .fetcher import WikipediaSource
from .translator import (
    choose_title,
    clean_extract,
    first_sentence,
    is_likely_board_game_title,
    is_rulebook_link,
    title_from_url,
    translate_page,
)

__all__ = [
    "WikipediaClient",
    "WikipediaSource",
    "choose_title",
    "clean_extract",
    "first_sentence",
    "is_likely_board_game_title",
    "is_rulebook_link",
    "title_from_url",
    "translate_page",
]
