"""Timeouts and batch sizes for the sync coordinator."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_env_var, int_env_var
from .errors import ConfigurationError

DEFAULT_ADAPTER_TIMEOUT_SECONDS = 10.0
DEFAULT_ORCHESTRATION_DEADLINE_SECONDS = 20.0
DEFAULT_PRIMARY_TIMEOUT_SECONDS = 30.0
DEFAULT_IMPORT_BATCH_SIZE = 10
DEFAULT_CONTENT_BATCH_SIZE = 50


@dataclass(frozen=True, slots=True)
class SyncConfig:
    adapter_timeout_seconds: float = DEFAULT_ADAPTER_TIMEOUT_SECONDS
    orchestration_deadline_seconds: float = DEFAULT_ORCHESTRATION_DEADLINE_SECONDS
    primary_timeout_seconds: float = DEFAULT_PRIMARY_TIMEOUT_SECONDS
    import_batch_size: int = DEFAULT_IMPORT_BATCH_SIZE
    content_batch_size: int = DEFAULT_CONTENT_BATCH_SIZE


def get_sync_config() -> SyncConfig:
    config = SyncConfig(
        adapter_timeout_seconds=float_env_var(
            "MEEPLESYNC_ADAPTER_TIMEOUT", DEFAULT_ADAPTER_TIMEOUT_SECONDS
        ),
        orchestration_deadline_seconds=float_env_var(
            "MEEPLESYNC_ENRICHMENT_DEADLINE", DEFAULT_ORCHESTRATION_DEADLINE_SECONDS
        ),
        primary_timeout_seconds=float_env_var(
            "MEEPLESYNC_PRIMARY_TIMEOUT", DEFAULT_PRIMARY_TIMEOUT_SECONDS
        ),
        import_batch_size=int_env_var("MEEPLESYNC_IMPORT_BATCH_SIZE", DEFAULT_IMPORT_BATCH_SIZE),
        content_batch_size=int_env_var(
            "MEEPLESYNC_CONTENT_BATCH_SIZE", DEFAULT_CONTENT_BATCH_SIZE
        ),
    )
    if config.orchestration_deadline_seconds < config.adapter_timeout_seconds:
        raise ConfigurationError(
            "MEEPLESYNC_ENRICHMENT_DEADLINE must not be shorter than MEEPLESYNC_ADAPTER_TIMEOUT"
        )
    return config
