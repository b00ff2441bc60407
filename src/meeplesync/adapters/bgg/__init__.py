"""BoardGameGeek primary catalog adapter."""

from __future__ import annotations

from .client import BggClient
from .fetcher import BggPrimarySource
from .schema import BggItem, BggLink, BggName, parse_thing_response
from .translator import translate_item

__all__ = [
    "BggClient",
    "BggItem",
    "BggLink",
    "BggName",
    "BggPrimarySource",
    "parse_thing_response",
    "translate_item",
]
