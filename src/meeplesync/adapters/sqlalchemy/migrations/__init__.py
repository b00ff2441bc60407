"""Programmatic access to the catalog's Alembic migrations.

The revision scripts ship inside this package, so upgrades work the same from a source
checkout and from an installed wheel. ``[tool.alembic]`` in pyproject.toml points the
``alembic`` command line at the same directory for authoring new revisions.
"""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from meeplesync.config.storage import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

log = getLogger(__name__)


def migration_config(database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Migrate to the newest revision, on ``engine`` if given, else on ``database_uri``.

    Without either, the configured catalog database is used.
    """

    if engine is None:
        config = migration_config(database_uri or get_database_config().uri)
        command.upgrade(config, "head")
        return

    config = migration_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
    log.debug("Catalog schema at head on %s", engine.url.render_as_string(hide_password=True))
