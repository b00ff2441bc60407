"""SQLAlchemy mapping metadata for the catalog model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from meeplesync.domain.model import (
    CatalogEntry,
    ImportQueueItem,
    PipelineState,
    QueueOrigin,
    QueueStatus,
    RelationKind,
    SyncCursor,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

catalog_entry_table = Table(
    "catalog_entry",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("bgg_id", Integer, nullable=False, unique=True),
    Column("wikidata_id", String(32), nullable=True, index=True),
    Column("name", String, nullable=True),
    Column("kind", String(32), nullable=False, default="boardgame"),
    Column("alternate_names", JSON, nullable=False, default=list),
    Column("year_published", Integer, nullable=True),
    Column("designers", JSON, nullable=False, default=list),
    Column("publishers", JSON, nullable=False, default=list),
    Column("categories", JSON, nullable=False, default=list),
    Column("mechanics", JSON, nullable=False, default=list),
    Column("series_families", JSON, nullable=False, default=list),
    Column("image_url", String, nullable=True),
    Column("thumbnail_url", String, nullable=True),
    Column("tagline", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("cover_image_url", String, nullable=True),
    Column("hero_image_url", String, nullable=True),
    Column("wikipedia_url", String, nullable=True),
    Column("official_url", String, nullable=True),
    Column("rulebook_url", String, nullable=True),
    Column("video_url", String, nullable=True),
    Column("category_slugs", JSON, nullable=False, default=list),
    Column("theme_slugs", JSON, nullable=False, default=list),
    Column("pipeline_state", Enum(PipelineState, native_enum=False), nullable=False),
    Column("pipeline_error", Text, nullable=True),
    Column("last_processed_at", UTCDateTime(), nullable=True),
    Column("content_updated_at", UTCDateTime(), nullable=True),
    Column("content_completeness", JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_catalog_entry_pipeline_state", "pipeline_state"),
)

# Keyed by primary-catalog IDs so the other side of a sequel need not be catalogued yet.
sequel_relation_table = Table(
    "sequel_relation",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("subject_bgg_id", Integer, nullable=False),
    Column("kind", Enum(RelationKind, native_enum=False), nullable=False),
    Column("object_bgg_id", Integer, nullable=False),
    Column("object_label", String, nullable=True),
    UniqueConstraint("subject_bgg_id", "kind", "object_bgg_id", name="uq_sequel_relation_edge"),
    Index("ix_sequel_relation_subject", "subject_bgg_id"),
)

series_membership_table = Table(
    "series_membership",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entry_id", UUIDColumnType, nullable=False),
    Column("series_id", String(32), nullable=False),
    Column("series_label", String, nullable=True),
    UniqueConstraint("entry_id", "series_id", name="uq_series_membership_entry_series"),
)

import_queue_table = Table(
    "import_queue",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("bgg_id", Integer, nullable=False, unique=True),
    Column("name", String, nullable=True),
    Column("origin", Enum(QueueOrigin, native_enum=False), nullable=False),
    Column("priority", Integer, nullable=False),
    Column("status", Enum(QueueStatus, native_enum=False), nullable=False),
    Column("attempts", Integer, nullable=False, default=0),
    Column("error", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_import_queue_status_priority", "status", "priority"),
)

sync_cursor_table = Table(
    "sync_cursor",
    mapper_registry.metadata,
    Column("key", String(64), primary_key=True),
    Column("cursor_value", String, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    Column("run_metadata", JSON, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CatalogEntry, catalog_entry_table)
    mapper_registry.map_imperatively(ImportQueueItem, import_queue_table)
    mapper_registry.map_imperatively(SyncCursor, sync_cursor_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
