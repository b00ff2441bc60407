"""Wikimedia Commons image adapter."""

from __future__ import annotations

from .client import CommonsClient
from .fetcher import CommonsSource
from .translator import CommonsImage, is_excluded, pick_images, score_image, translate_images

__all__ = [
    "CommonsClient",
    "CommonsImage",
    "CommonsSource",
    "is_excluded",
    "pick_images",
    "score_image",
    "translate_images",
]
