"""Application configuration helpers."""

from __future__ import annotations

from .bgg import BggConfig, get_bgg_config
from .content_feed import ContentFeedConfig, get_content_feed_config
from .env import optional_env_var, require_env_vars, user_agent
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config
from .wikimedia import (
    CommonsConfig,
    WikidataConfig,
    WikipediaConfig,
    get_commons_config,
    get_wikidata_config,
    get_wikipedia_config,
)
from .youtube import YouTubeConfig, get_youtube_config

__all__ = [
    "BggConfig",
    "CacheConfig",
    "CommonsConfig",
    "ConfigurationError",
    "ContentFeedConfig",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "WikidataConfig",
    "WikipediaConfig",
    "YouTubeConfig",
    "get_bgg_config",
    "get_commons_config",
    "get_content_feed_config",
    "get_database_config",
    "get_storage_config",
    "get_sync_config",
    "get_wikidata_config",
    "get_wikipedia_config",
    "get_youtube_config",
    "optional_env_var",
    "require_env_vars",
    "user_agent",
]
