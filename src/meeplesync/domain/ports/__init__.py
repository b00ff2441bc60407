"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    CatalogEntryRepository,
    ImportQueueRepository,
    RelationRepository,
    Repository,
    SyncCursorRepository,
)
from .sources import (
    ArticleFetcher,
    ContentFeed,
    ContentFeedItem,
    ContentFeedPage,
    PrimaryCatalogSource,
    SourceAdapter,
)
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork

__all__ = [
    "ArticleFetcher",
    "CatalogEntryRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "ContentFeed",
    "ContentFeedItem",
    "ContentFeedPage",
    "ImportQueueRepository",
    "PrimaryCatalogSource",
    "RelationRepository",
    "Repository",
    "SourceAdapter",
    "SyncCursorRepository",
]
