"""Mapping of primary-catalog category names onto the internal taxonomy."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Final

CATEGORY_MAP: Final[Mapping[str, str]] = MappingProxyType(
    {
        "Abstract Strategy": "strategy",
        "Economic": "economic",
        "City Building": "strategy",
        "Territory Building": "strategy",
        "Civilization": "strategy",
        "Wargame": "strategy",
        "Family Game": "family",
        "Children's Game": "family",
        "Party Game": "party",
        "Humor": "party",
        "Adventure": "thematic",
        "Horror": "thematic",
        "Fantasy": "thematic",
        "Science Fiction": "thematic",
        "Exploration": "thematic",
        "Animals": "thematic",
        "Environmental": "thematic",
        "Zombies": "thematic",
        "Pirates": "thematic",
        "Mythology": "thematic",
        "Medieval": "thematic",
        "Cooperative": "cooperative",
        "Solo / Solitaire Game": "cooperative",
        "Two-Player Only": "two-player",
        "Abstract": "abstract",
        "Puzzle": "abstract",
        "Card Game": "deck-building",
        "Collectible Components": "deck-building",
        "Campaign / Battle Card Driven": "campaign",
    }
)

_THEMES: Final[Mapping[str, tuple[str, ...]]] = {
    "fantasy": ("Fantasy", "Arabian"),
    "sci-fi": ("Science Fiction", "Space Exploration"),
    "historical": (
        "Ancient",
        "Age of Reason",
        "American Revolutionary War",
        "American West",
        "Civilization",
        "Modern Warfare",
        "Napoleonic",
        "Political",
        "Post-Napoleonic",
        "Renaissance",
    ),
    "horror": ("Horror", "Zombies", "Mature / Adult"),
    "nature": ("Animals", "Farming", "Environmental"),
    "mystery": ("Deduction", "Murder/Mystery", "Spies/Secret Agents"),
    "war": (
        "Wargame",
        "Fighting",
        "Aviation / Flight",
        "American Civil War",
        "World War I",
        "World War II",
        "Vietnam War",
        "Korean War",
    ),
    "economic": ("Economic", "Industry / Manufacturing", "Negotiation"),
    "pirates": ("Pirates", "Nautical"),
    "medieval": ("Medieval", "City Building"),
    "post-apocalyptic": ("Post-Apocalyptic",),
    "abstract": ("Abstract Strategy", "Puzzle"),
    "humor": ("Humor", "Party Game", "Comic Book / Strip"),
    "mythology": ("Mythology", "Greek Mythology", "Norse Mythology"),
}

# One category name may carry several themes ("Civilization" is historical, "Wargame" is war).
THEME_MAP: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        name: tuple(sorted(slug for slug, names in _THEMES.items() if name in names))
        for name in {name for names in _THEMES.values() for name in names}
    }
)


def map_categories(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({CATEGORY_MAP[name] for name in _clean(names) if name in CATEGORY_MAP}))


def map_themes(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({slug for name in _clean(names) for slug in THEME_MAP.get(name, ())}))


def _clean(names: Iterable[str]) -> Iterable[str]:
    return (name.strip() for name in names if name and name.strip())
