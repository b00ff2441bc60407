"""YouTube Data API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars, user_agent
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_YOUTUBE_BASE_URL = "https://www.googleapis.com/youtube/v3"


@dataclass(frozen=True, slots=True)
class YouTubeConfig:
    api_key: str
    resilience: ResilienceConfig
    query_suffix: str = "board game how to play"


def _is_success_payload(payload: object) -> bool:
    return isinstance(payload, dict) and "error" not in payload


def get_youtube_config() -> YouTubeConfig:
    values = require_env_vars(("YOUTUBE_API_KEY",))

    resilience = ResilienceConfig(
        name="youtube",
        base_url=DEFAULT_YOUTUBE_BASE_URL,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        retry=RetryPolicy(total=2),
        # search.list costs 100 quota units per call; keep answers for a day
        cache=CacheConfig(
            enabled=True,
            backend="sqlite",
            default_ttl_seconds=24 * 3600,
            should_cache=_is_success_payload,
        ),
        default_headers={"User-Agent": user_agent(), "Accept": "application/json"},
    )
    return YouTubeConfig(api_key=values["YOUTUBE_API_KEY"], resilience=resilience)
