"""The import queue: primary-catalog IDs waiting for their first import."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.domain.model import ImportQueueItem, QueueOrigin, QueueStatus, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork
    from meeplesync.domain.sync.coordinator import SyncCoordinator, SyncOutcome

log = getLogger(__name__)

DEFAULT_PRIORITY = 3
MAX_ATTEMPTS = 3


class EnqueueOutcome(StrEnum):
    QUEUED = "queued"
    ALREADY_QUEUED = "already queued"
    ALREADY_CATALOGUED = "already catalogued"


@dataclass(slots=True)
class ImportQueueResult:
    attempted: int = 0
    imported: int = 0
    failed: int = 0
    rejected: int = 0


def enqueue_import(
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    bgg_id: int,
    *,
    origin: QueueOrigin = QueueOrigin.MANUAL,
    name: str | None = None,
    priority: int = DEFAULT_PRIORITY,
) -> EnqueueOutcome:
    """Queue ``bgg_id`` for import unless it is already queued or catalogued."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        if repositories.import_queue.get_by_bgg_id(bgg_id) is not None:
            return EnqueueOutcome.ALREADY_QUEUED
        if repositories.entries.get_by_bgg_id(bgg_id) is not None:
            return EnqueueOutcome.ALREADY_CATALOGUED
        repositories.import_queue.add(
            ImportQueueItem(bgg_id=bgg_id, name=name, origin=origin, priority=priority)
        )
        uow.commit()
    log.debug("Queued %s (origin=%s, priority=%s)", bgg_id, origin, priority)
    return EnqueueOutcome.QUEUED


def import_pending(
    coordinator: SyncCoordinator,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    *,
    limit: int,
) -> ImportQueueResult:
    """Import up to ``limit`` pending items, highest priority (lowest number) first.

    A failed import goes back to pending until the item has been tried ``MAX_ATTEMPTS``
    times; after that it stays failed with the last error.
    """

    with unit_of_work_factory() as uow:
        bgg_ids = [item.bgg_id for item in uow.repositories.import_queue.next_pending(limit)]

    result = ImportQueueResult()
    for bgg_id in bgg_ids:
        result.attempted += 1
        attempts = _start_attempt(unit_of_work_factory, bgg_id)
        try:
            outcome = coordinator.import_entry(bgg_id)
        except Exception as exc:
            log.exception("Import of queued %s raised", bgg_id)
            error = f"{type(exc).__name__}: {exc}"
        else:
            if outcome.rejected:
                result.rejected += 1
                _mark(unit_of_work_factory, bgg_id, QueueStatus.PENDING)
                continue
            if outcome.succeeded:
                result.imported += 1
                _mark(unit_of_work_factory, bgg_id, QueueStatus.COMPLETED)
                continue
            error = _describe(outcome)

        result.failed += 1
        status = QueueStatus.PENDING if attempts < MAX_ATTEMPTS else QueueStatus.FAILED
        _mark(unit_of_work_factory, bgg_id, status, error=error)

    log.info(
        "Processed import queue: attempted=%s, imported=%s, failed=%s, rejected=%s",
        result.attempted,
        result.imported,
        result.failed,
        result.rejected,
    )
    return result


def _start_attempt(unit_of_work_factory: Callable[[], CatalogUnitOfWork], bgg_id: int) -> int:
    with unit_of_work_factory() as uow:
        item = uow.repositories.import_queue.get_by_bgg_id(bgg_id)
        if item is None:
            return MAX_ATTEMPTS
        item.status = QueueStatus.IMPORTING
        item.attempts += 1
        item.updated_at = utcnow()
        uow.commit()
        return item.attempts


def _mark(
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    bgg_id: int,
    status: QueueStatus,
    *,
    error: str | None = None,
) -> None:
    with unit_of_work_factory() as uow:
        item = uow.repositories.import_queue.get_by_bgg_id(bgg_id)
        if item is None:
            return
        item.status = status
        item.error = error
        item.updated_at = utcnow()
        uow.commit()


def _describe(outcome: SyncOutcome) -> str:
    return outcome.error or f"import ended in state {outcome.state}"
