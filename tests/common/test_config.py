from __future__ import annotations

import pytest

from meeplesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_bgg_config,
    get_content_feed_config,
    get_sync_config,
    get_youtube_config,
    require_env_vars,
)
from meeplesync.config.bgg import DEFAULT_BGG_BASE_URL
from meeplesync.config.sync import DEFAULT_ADAPTER_TIMEOUT_SECONDS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MEEPLESYNC_ADAPTER_TIMEOUT",
        "MEEPLESYNC_ENRICHMENT_DEADLINE",
        "MEEPLESYNC_PRIMARY_TIMEOUT",
        "MEEPLESYNC_IMPORT_BATCH_SIZE",
        "MEEPLESYNC_CONTENT_BATCH_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_sync_config()

    assert config.adapter_timeout_seconds == DEFAULT_ADAPTER_TIMEOUT_SECONDS
    assert config.orchestration_deadline_seconds >= config.adapter_timeout_seconds


def test_sync_config_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEEPLESYNC_ADAPTER_TIMEOUT", "2.5")
    monkeypatch.setenv("MEEPLESYNC_ENRICHMENT_DEADLINE", "4")
    monkeypatch.setenv("MEEPLESYNC_IMPORT_BATCH_SIZE", "7")

    config = get_sync_config()

    assert config.adapter_timeout_seconds == 2.5
    assert config.orchestration_deadline_seconds == 4.0
    assert config.import_batch_size == 7


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("MEEPLESYNC_ADAPTER_TIMEOUT", "soon"),
        ("MEEPLESYNC_ADAPTER_TIMEOUT", "-1"),
        ("MEEPLESYNC_IMPORT_BATCH_SIZE", "1.5"),
    ],
)
def test_sync_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_sync_config_rejects_deadline_shorter_than_timeout(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("MEEPLESYNC_ADAPTER_TIMEOUT", "10")
    monkeypatch.setenv("MEEPLESYNC_ENRICHMENT_DEADLINE", "5")

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_youtube_config_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_youtube_config()


def test_content_feed_config_builds_authorised_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTENT_FEED_URL", "https://content.example/api/")
    monkeypatch.setenv("CONTENT_FEED_API_KEY", "secret")

    config = get_content_feed_config()

    assert config.resilience.base_url == "https://content.example/api"
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer secret"
    assert 429 in config.resilience.retry.status_forcelist


def test_bgg_config_retries_queued_responses(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BGG_BASE_URL", raising=False)
    monkeypatch.setenv("BGG_API_TOKEN", "token")

    config = get_bgg_config()

    assert config.resilience.base_url == DEFAULT_BGG_BASE_URL
    assert 202 in config.resilience.retry.status_forcelist
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer token"
