"""Public domain model surface."""

from __future__ import annotations

from meeplesync.domain.model.bookkeeping import ImportQueueItem, SyncCursor
from meeplesync.domain.model.catalog import CatalogEntry, new_id, utcnow
from meeplesync.domain.model.enums import (
    PRIMARY_SOURCE,
    SECONDARY_SOURCES,
    Actor,
    EnrichableField,
    PipelineState,
    QueueOrigin,
    QueueStatus,
    RelationKind,
    Source,
)
from meeplesync.domain.model.relations import SequelRelation, SeriesMembership

__all__ = [  # noqa: RUF022
    "PRIMARY_SOURCE",
    "SECONDARY_SOURCES",
    "Actor",
    "CatalogEntry",
    "EnrichableField",
    "ImportQueueItem",
    "PipelineState",
    "QueueOrigin",
    "QueueStatus",
    "RelationKind",
    "SequelRelation",
    "SeriesMembership",
    "Source",
    "SyncCursor",
    "new_id",
    "utcnow",
]
