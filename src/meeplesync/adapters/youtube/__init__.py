"""YouTube video adapter."""

from __future__ import annotations

from .client import YouTubeClient
from .fetcher import YouTubeSource, first_video_url

__all__ = ["YouTubeClient", "YouTubeSource", "first_video_url"]
