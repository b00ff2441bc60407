"""Wikidata knowledge-graph adapter."""

from __future__ import annotations

from .client import WikidataClient
from .fetcher import WikidataSource
from .queries import game_by_bgg_id, game_by_label
from .translator import entity_id, normalise_url, translate_rows

__all__ = [
    "WikidataClient",
    "WikidataSource",
    "entity_id",
    "game_by_bgg_id",
    "game_by_label",
    "normalise_url",
    "translate_rows",
]
