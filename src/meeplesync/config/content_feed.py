"""Content feed configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars, user_agent
from .http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

CONTENT_FEED_CURSOR_KEY = "content_feed"


@dataclass(frozen=True, slots=True)
class ContentFeedConfig:
    resilience: ResilienceConfig
    cursor_key: str = CONTENT_FEED_CURSOR_KEY


def get_content_feed_config() -> ContentFeedConfig:
    values = require_env_vars(("CONTENT_FEED_URL", "CONTENT_FEED_API_KEY"))

    resilience = ResilienceConfig(
        name="content-feed",
        base_url=values["CONTENT_FEED_URL"].rstrip("/"),
        retry=RetryPolicy(total=3).with_statuses(429),
        cache=None,
        default_headers={
            "User-Agent": user_agent(),
            "Accept": "application/json",
            "Authorization": f"Bearer {values['CONTENT_FEED_API_KEY']}",
        },
    )
    return ContentFeedConfig(resilience=resilience)
