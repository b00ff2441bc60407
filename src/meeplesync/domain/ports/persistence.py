"""Ports for persisting the catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from meeplesync.domain.model import CatalogEntry, ImportQueueItem

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from meeplesync.domain.model import (
        PipelineState,
        SequelRelation,
        SeriesMembership,
        SyncCursor,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CatalogEntryRepository(Repository[CatalogEntry], Protocol):
    def get(self, entry_id: UUID) -> CatalogEntry | None: ...

    def get_by_bgg_id(self, bgg_id: int) -> CatalogEntry | None: ...

    def list_by_state(
        self,
        state: PipelineState,
        *,
        limit: int | None = None,
    ) -> list[CatalogEntry]: ...

    def compare_and_set_state(
        self,
        entry_id: UUID,
        *,
        expected: PipelineState,
        target: PipelineState,
        error: str | None,
        processed_at: datetime,
    ) -> bool:
        """Atomically move ``entry_id`` from ``expected`` to ``target``.

        Returns False (and changes nothing) when the stored state is not ``expected``.
        """
        ...

    def apply_content(
        self,
        bgg_id: int,
        *,
        updated_at: datetime,
        completeness: dict[str, Any] | None,
        tagline: str | None,
        description: str | None,
    ) -> bool:
        """Record curated content unless the stored content is as new or newer.

        Tagline and description are only written where the stored row still has none at
        write time. Returns False when nothing was applied.
        """
        ...

    def count_with_content(self) -> int: ...

    def count_without_content(self) -> int: ...


@runtime_checkable
class RelationRepository(Protocol):
    def add_sequels(self, relations: Iterable[SequelRelation]) -> int:
        """Insert relations, ignoring rows that already exist. Returns the number inserted."""
        ...

    def sequels_for(self, bgg_id: int) -> list[SequelRelation]: ...

    def add_series(self, entry_id: UUID, memberships: Iterable[SeriesMembership]) -> int: ...

    def series_for(self, entry_id: UUID) -> list[SeriesMembership]: ...


@runtime_checkable
class ImportQueueRepository(Repository[ImportQueueItem], Protocol):
    def get_by_bgg_id(self, bgg_id: int) -> ImportQueueItem | None: ...

    def next_pending(self, limit: int) -> list[ImportQueueItem]: ...


@runtime_checkable
class SyncCursorRepository(Protocol):
    def get(self, key: str) -> SyncCursor | None: ...

    def save(self, cursor: SyncCursor) -> None: ...
