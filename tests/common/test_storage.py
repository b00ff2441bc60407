from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from meeplesync.config import storage


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("MEEPLESYNC_DATA_DIR", str(custom))

    config = storage.get_storage_config()

    assert config.data_dir == custom.resolve()
    assert not custom.exists()


def test_database_config_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert storage.get_database_config().uri == "sqlite:///override.db"


def test_database_config_creates_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("MEEPLESYNC_DATA_DIR", str(tmp_path / "data-dir"))

    uri = storage.get_database_config().uri

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_http_cache_lives_in_data_dir_unless_overridden(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("MEEPLESYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MEEPLESYNC_HTTP_CACHE", raising=False)

    default = storage.get_storage_config().http_cache_path()

    monkeypatch.setenv("MEEPLESYNC_HTTP_CACHE", str(tmp_path / "cache" / "responses.db"))
    overridden = storage.get_storage_config().http_cache_path()

    assert default == (tmp_path / "data" / storage.HTTP_CACHE_FILENAME).resolve()
    assert overridden == (tmp_path / "cache" / "responses.db").resolve()
    assert overridden.parent.exists()
