"""Operational records: the import queue and sync cursors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from meeplesync.domain.model.catalog import new_id, utcnow
from meeplesync.domain.model.enums import QueueOrigin, QueueStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class ImportQueueItem:
    id: UUID = field(default_factory=new_id)
    bgg_id: int
    name: str | None = None
    origin: QueueOrigin = QueueOrigin.MANUAL
    priority: int = 3
    status: QueueStatus = QueueStatus.PENDING
    attempts: int = 0
    error: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class SyncCursor:
    key: str
    cursor_value: str
    updated_at: datetime | None = None
    run_metadata: dict[str, Any] | None = None
