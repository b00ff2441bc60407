"""Helpers shared by the command line and the application layer."""

from __future__ import annotations

from .logging import configure_logging

__all__ = ["configure_logging"]
