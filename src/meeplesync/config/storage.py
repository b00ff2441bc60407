"""Where meeplesync keeps the catalog database and the shared HTTP response cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "meeplesync"
DEFAULT_DB_FILENAME: Final[str] = "catalog.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Resolved storage locations.

    ``data_dir`` is created lazily, the first time a path inside it is handed out.
    ``database_uri_override`` points the catalog at another database altogether.
    """

    data_dir: Path
    database_uri_override: str | None = None
    http_cache_override: Path | None = None

    @property
    def database_path(self) -> Path:
        return self.data_dir / DEFAULT_DB_FILENAME

    def database_uri(self) -> str:
        if self.database_uri_override is not None:
            return self.database_uri_override
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.database_path}"

    def http_cache_path(self) -> Path:
        path = self.http_cache_override or self.data_dir / HTTP_CACHE_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def platform_data_dir() -> Path:
    if os.name == "nt":
        root = optional_env_var("LOCALAPPDATA")
        base = Path(root) if root else Path.home() / "AppData" / "Local"
    else:
        root = optional_env_var("XDG_DATA_HOME")
        base = Path(root) if root else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    data_dir = optional_env_var("MEEPLESYNC_DATA_DIR")
    http_cache = optional_env_var("MEEPLESYNC_HTTP_CACHE")
    return StorageConfig(
        data_dir=Path(data_dir or platform_data_dir()).expanduser().resolve(),
        database_uri_override=optional_env_var("DATABASE_URI"),
        http_cache_override=Path(http_cache).expanduser().resolve() if http_cache else None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
