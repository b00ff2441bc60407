"""The transaction boundary every catalog operation runs inside."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from meeplesync.domain.ports.persistence import (
        CatalogEntryRepository,
        ImportQueueRepository,
        RelationRepository,
        SyncCursorRepository,
    )


@dataclass(frozen=True, slots=True)
class CatalogRepositories:
    """Repositories sharing one session; only valid while their unit of work is open."""

    entries: CatalogEntryRepository
    relations: RelationRepository
    import_queue: ImportQueueRepository
    sync_cursors: SyncCursorRepository


@runtime_checkable
class CatalogUnitOfWork(Protocol):
    """Opens a transaction on enter.

    Nothing is persisted unless ``commit()`` is called inside the ``with`` block; leaving
    it through an exception rolls the transaction back.
    """

    @property
    def repositories(self) -> CatalogRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
