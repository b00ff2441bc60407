"""BoardGameGeek XML API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, user_agent
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_BGG_BASE_URL = "https://boardgamegeek.com/xmlapi2"

# BGG answers 202 while it queues a request; asking again later yields the payload.
BGG_RETRY = RetryPolicy(total=5, backoff_factor=1.0).with_statuses(202, 429)


@dataclass(frozen=True, slots=True)
class BggConfig:
    resilience: ResilienceConfig


def get_bgg_config() -> BggConfig:
    headers = {"User-Agent": user_agent(), "Accept": "application/xml"}
    token = optional_env_var("BGG_API_TOKEN")
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"

    resilience = ResilienceConfig(
        name="bgg",
        base_url=optional_env_var("BGG_BASE_URL") or DEFAULT_BGG_BASE_URL,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.1),
        retry=BGG_RETRY,
        cache=CacheConfig(enabled=True, backend="sqlite", default_ttl_seconds=6 * 3600),
        default_headers=headers,
    )
    return BggConfig(resilience=resilience)
