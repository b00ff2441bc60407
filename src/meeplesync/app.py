"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.bgg import BggPrimarySource
from meeplesync.adapters.commons import CommonsSource
from meeplesync.adapters.content_feed import HttpContentFeed
from meeplesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from meeplesync.adapters.wikidata import WikidataSource
from meeplesync.adapters.wikipedia import WikipediaSource
from meeplesync.adapters.youtube import YouTubeSource
from meeplesync.config import (
    MissingConfigurationError,
    get_content_feed_config,
    get_sync_config,
    get_youtube_config,
)
from meeplesync.config.content_feed import CONTENT_FEED_CURSOR_KEY
from meeplesync.domain.enrichment import EnrichmentOrchestrator
from meeplesync.domain.model import QueueOrigin
from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork
from meeplesync.domain.sync import (
    ContentSyncResult,
    ContentSyncStatus,
    ImportQueueResult,
    SyncCoordinator,
    SyncOutcome,
    content_sync_status,
    enqueue_import,
    import_pending,
    sync_content_feed,
)
from meeplesync.domain.sync.queue import DEFAULT_PRIORITY, EnqueueOutcome

if TYPE_CHECKING:
    from uuid import UUID

    from meeplesync.config import SyncConfig
    from meeplesync.domain.model import Actor, PipelineState
    from meeplesync.domain.pipeline import TransitionResult
    from meeplesync.domain.ports.sources import ContentFeed, SourceAdapter

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = getLogger(__name__)


def build_secondary_adapters() -> list[SourceAdapter]:
    """Secondary sources in use; YouTube is left out when no API key is configured."""

    adapters: list[SourceAdapter] = [WikidataSource(), WikipediaSource(), CommonsSource()]
    try:
        youtube_config = get_youtube_config()
    except MissingConfigurationError:
        log.warning("YOUTUBE_API_KEY is not set; skipping video enrichment")
    else:
        adapters.append(YouTubeSource(config=youtube_config))
    return adapters


def build_coordinator(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> SyncCoordinator:
    _ensure_persistence()
    config = sync_config or get_sync_config()
    adapters = build_secondary_adapters()
    article_fetcher = next(
        (adapter for adapter in adapters if isinstance(adapter, WikipediaSource)), None
    )
    orchestrator = EnrichmentOrchestrator(
        adapters,
        adapter_timeout=config.adapter_timeout_seconds,
        deadline=config.orchestration_deadline_seconds,
        article_fetcher=article_fetcher,
    )
    return SyncCoordinator(
        primary=BggPrimarySource(),
        orchestrator=orchestrator,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        primary_timeout=config.primary_timeout_seconds,
    )


def import_game(bgg_id: int, *, coordinator: SyncCoordinator | None = None) -> SyncOutcome:
    """Import a game by BoardGameGeek ID (re-syncs it when already catalogued)."""

    effective = coordinator or build_coordinator()
    log.info("Starting import of BGG %s", bgg_id)
    outcome = effective.import_entry(bgg_id)
    _log_outcome(outcome)
    return outcome


def resync_game(entry_id: UUID, *, coordinator: SyncCoordinator | None = None) -> SyncOutcome:
    effective = coordinator or build_coordinator()
    log.info("Starting re-sync of entry %s", entry_id)
    outcome = effective.resync_entry(entry_id)
    _log_outcome(outcome)
    return outcome


def transition_game(
    entry_id: UUID,
    target: PipelineState,
    *,
    actor: Actor,
    error: str | None = None,
    coordinator: SyncCoordinator | None = None,
) -> TransitionResult:
    effective = coordinator or build_coordinator()
    result = effective.request_transition(entry_id, target, actor=actor, error=error)
    if result.accepted:
        log.info("Entry %s moved %s -> %s", entry_id, result.previous, result.state)
    else:
        log.warning("Transition of %s to %s rejected: %s", entry_id, target, result.reason)
    return result


def queue_game(
    bgg_id: int,
    *,
    name: str | None = None,
    priority: int = DEFAULT_PRIORITY,
    origin: QueueOrigin = QueueOrigin.MANUAL,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    _ensure_persistence()
    effective_uow = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork
    outcome = enqueue_import(effective_uow, bgg_id, origin=origin, name=name, priority=priority)
    if outcome is EnqueueOutcome.QUEUED:
        log.info("Queued BGG %s for import", bgg_id)
        return True
    log.info("BGG %s not queued: %s", bgg_id, outcome)
    return False


def process_import_queue(
    *,
    limit: int | None = None,
    coordinator: SyncCoordinator | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportQueueResult:
    effective_uow = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork
    effective = coordinator or build_coordinator(unit_of_work_factory=effective_uow)
    batch = limit or get_sync_config().import_batch_size
    log.info("Processing up to %s queued import(s)", batch)

    result = import_pending(effective, effective_uow, limit=batch)

    log.info(
        "Finished import queue: attempted=%s, imported=%s, failed=%s, rejected=%s",
        result.attempted,
        result.imported,
        result.failed,
        result.rejected,
    )
    return result


def sync_content(
    *,
    feed: ContentFeed | None = None,
    limit: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ContentSyncResult:
    """Pull one page of curated content from the feed, starting at the stored cursor."""

    _ensure_persistence()
    if feed is None:
        config = get_content_feed_config()
        feed = HttpContentFeed(config=config)
        cursor_key = config.cursor_key
    else:
        cursor_key = CONTENT_FEED_CURSOR_KEY
    batch = limit or get_sync_config().content_batch_size

    result = sync_content_feed(
        feed=feed,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        limit=batch,
        cursor_key=cursor_key,
    )

    log.info(
        "Finished content sync: processed=%s, updated=%s, skipped=%s, errors=%s, "
        "cursor=%s, has_more=%s",
        result.processed,
        result.updated,
        result.skipped,
        len(result.errors),
        result.cursor,
        result.has_more,
    )
    return result


def content_status(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ContentSyncStatus:
    _ensure_persistence()
    status = content_sync_status(unit_of_work_factory or SqlAlchemyCatalogUnitOfWork)
    log.info(
        "Content sync status: cursor=%s, last_run_at=%s, with_content=%s, without_content=%s",
        status.cursor,
        status.last_run_at,
        status.with_content,
        status.without_content,
    )
    return status


def _log_outcome(outcome: SyncOutcome) -> None:
    if outcome.rejected:
        log.warning("BGG %s was not synced: %s", outcome.bgg_id, outcome.error)
        return
    log.info(
        "Finished BGG %s: entry=%s, state=%s, succeeded=%s, degraded=%s, changed=%s, relations=%s",
        outcome.bgg_id,
        outcome.entry_id,
        outcome.state,
        outcome.succeeded,
        outcome.degraded,
        ",".join(outcome.changed_fields) or "-",
        outcome.relations_added,
    )
    if outcome.error:
        log.warning("BGG %s ended with error: %s", outcome.bgg_id, outcome.error)
    for source, retry_after in outcome.rate_limit_hints.items():
        log.warning("%s is rate limited; retry after %ss", source, retry_after)


def _ensure_persistence() -> None:
    if not is_started():
        startup()
