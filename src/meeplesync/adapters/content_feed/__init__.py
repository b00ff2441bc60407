"""Curated content feed adapter."""

from __future__ import annotations

from .client import HttpContentFeed, parse_timestamp

__all__ = ["HttpContentFeed", "parse_timestamp"]
