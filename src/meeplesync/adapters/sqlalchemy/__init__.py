"""SQLAlchemy adapter package for meeplesync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCatalogEntryRepository,
    SqlAlchemyImportQueueRepository,
    SqlAlchemyRelationRepository,
    SqlAlchemySyncCursorRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogEntryRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyImportQueueRepository",
    "SqlAlchemyRelationRepository",
    "SqlAlchemySyncCursorRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
