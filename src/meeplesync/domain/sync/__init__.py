from __future__ import annotations

from .apply import apply_merged, apply_primary_record, sequel_relations, series_memberships
from .content_sync import (
    EPOCH_CURSOR,
    ContentSyncError,
    ContentSyncResult,
    ContentSyncStatus,
    content_sync_status,
    sync_content_feed,
)
from .coordinator import SyncCoordinator, SyncOutcome
from .guard import EntryGuard
from .queue import EnqueueOutcome, ImportQueueResult, enqueue_import, import_pending
from .taxonomy import CATEGORY_MAP, THEME_MAP, map_categories, map_themes

__all__ = [
    "CATEGORY_MAP",
    "EPOCH_CURSOR",
    "THEME_MAP",
    "ContentSyncError",
    "ContentSyncResult",
    "ContentSyncStatus",
    "EnqueueOutcome",
    "EntryGuard",
    "ImportQueueResult",
    "SyncCoordinator",
    "SyncOutcome",
    "apply_merged",
    "apply_primary_record",
    "content_sync_status",
    "enqueue_import",
    "import_pending",
    "map_categories",
    "map_themes",
    "sequel_relations",
    "series_memberships",
    "sync_content_feed",
]
