"""Configuration for the Wikimedia family of sources (Wikidata, Wikipedia, Commons)."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, user_agent
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_WIKIDATA_SPARQL_URL = "https://query.wikidata.org/sparql"
DEFAULT_WIKIPEDIA_API_URL = "https://en.wikipedia.org/w/api.php"
DEFAULT_COMMONS_API_URL = "https://commons.wikimedia.org/w/api.php"


@dataclass(frozen=True, slots=True)
class WikidataConfig:
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class WikipediaConfig:
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class CommonsConfig:
    resilience: ResilienceConfig
    search_limit: int = 10
    thumb_width: int = 1280


def _headers(accept: str) -> dict[str, str]:
    headers = {"User-Agent": user_agent(), "Accept": accept}
    token = optional_env_var("WIKIMEDIA_ACCESS_TOKEN")
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def get_wikidata_config() -> WikidataConfig:
    resilience = ResilienceConfig(
        name="wikidata",
        base_url=DEFAULT_WIKIDATA_SPARQL_URL,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        retry=RetryPolicy(total=2),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers=_headers("application/sparql-results+json"),
    )
    return WikidataConfig(resilience=resilience)


def get_wikipedia_config() -> WikipediaConfig:
    resilience = ResilienceConfig(
        name="wikipedia",
        base_url=DEFAULT_WIKIPEDIA_API_URL,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        retry=RetryPolicy(total=2),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers=_headers("application/json"),
    )
    return WikipediaConfig(resilience=resilience)


def get_commons_config() -> CommonsConfig:
    resilience = ResilienceConfig(
        name="commons",
        base_url=DEFAULT_COMMONS_API_URL,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        retry=RetryPolicy(total=2),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers=_headers("application/json"),
    )
    return CommonsConfig(resilience=resilience)
