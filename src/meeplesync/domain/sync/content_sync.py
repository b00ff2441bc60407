"""Incremental sync of curated content from the external content feed.

The feed is read from a persisted cursor. Items whose entry already carries newer content
are skipped, so replaying a page never applies it twice. Curated text only fills gaps:
tagline and description are written with conditional updates, and only where the stored row
still has none, so a value written concurrently by an enrichment run is kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from meeplesync.domain.model import SyncCursor, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.domain.ports.persistence import CatalogEntryRepository
    from meeplesync.domain.ports.sources import ContentFeed, ContentFeedItem
    from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)

EPOCH_CURSOR: Final = "1970-01-01T00:00:00.000Z"
DEFAULT_CURSOR_KEY: Final = "content_feed"


@dataclass(frozen=True, slots=True)
class ContentSyncError:
    bgg_id: int
    message: str


@dataclass(slots=True)
class ContentSyncResult:
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[ContentSyncError] = field(default_factory=list[ContentSyncError])
    cursor: str = EPOCH_CURSOR
    has_more: bool = False
    with_content: int = 0
    without_content: int = 0


@dataclass(frozen=True, slots=True)
class ContentSyncStatus:
    cursor: str
    last_run_at: str | None
    with_content: int
    without_content: int


def sync_content_feed(
    *,
    feed: ContentFeed,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    limit: int,
    cursor_key: str = DEFAULT_CURSOR_KEY,
    clock: Callable[[], datetime] = utcnow,
) -> ContentSyncResult:
    """Pull one page from the feed, apply it and advance the cursor."""

    result = ContentSyncResult()
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        stored = repositories.sync_cursors.get(cursor_key)
        since = stored.cursor_value if stored is not None else EPOCH_CURSOR
        result.cursor = since

        page = feed.fetch_page(since=since, limit=limit)
        result.has_more = page.has_more

        newest: ContentFeedItem | None = None
        for item in page.items:
            result.processed += 1
            entry = repositories.entries.get_by_bgg_id(item.bgg_id)
            if entry is None:
                result.skipped += 1
                result.errors.append(ContentSyncError(item.bgg_id, "entry not found"))
            elif _apply_item(repositories.entries, item):
                result.updated += 1
            else:
                result.skipped += 1
            if newest is None or item.updated_at > newest.updated_at:
                newest = item

        if newest is not None:
            if newest.updated_at > _parse_cursor(since):
                result.cursor = newest.updated_at_raw
            repositories.sync_cursors.save(
                SyncCursor(
                    key=cursor_key,
                    cursor_value=result.cursor,
                    updated_at=clock(),
                    run_metadata={
                        "last_run_at": clock().isoformat(),
                        "processed": result.processed,
                        "updated": result.updated,
                        "skipped": result.skipped,
                        "error_count": len(result.errors),
                    },
                )
            )
        uow.commit()

        result.with_content = repositories.entries.count_with_content()
        result.without_content = repositories.entries.count_without_content()

    for error in result.errors:
        log.warning("Content feed item %s skipped: %s", error.bgg_id, error.message)
    log.info(
        "Content sync: processed=%s, updated=%s, skipped=%s, errors=%s, cursor=%s, has_more=%s",
        result.processed,
        result.updated,
        result.skipped,
        len(result.errors),
        result.cursor,
        result.has_more,
    )
    return result


def content_sync_status(
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    *,
    cursor_key: str = DEFAULT_CURSOR_KEY,
) -> ContentSyncStatus:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        stored = repositories.sync_cursors.get(cursor_key)
        metadata = (stored.run_metadata or {}) if stored is not None else {}
        last_run_at = metadata.get("last_run_at")
        return ContentSyncStatus(
            cursor=stored.cursor_value if stored is not None else EPOCH_CURSOR,
            last_run_at=str(last_run_at) if last_run_at is not None else None,
            with_content=repositories.entries.count_with_content(),
            without_content=repositories.entries.count_without_content(),
        )


def _apply_item(entries: CatalogEntryRepository, item: ContentFeedItem) -> bool:
    return entries.apply_content(
        item.bgg_id,
        updated_at=item.updated_at,
        completeness=dict(item.completeness) if item.completeness is not None else None,
        tagline=item.tagline,
        description=item.description,
    )


def _parse_cursor(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
