"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, or_, select, update

from meeplesync.adapters.sqlalchemy.mappings import (
    catalog_entry_table,
    import_queue_table,
    sequel_relation_table,
    series_membership_table,
)
from meeplesync.domain.model import (
    CatalogEntry,
    ImportQueueItem,
    QueueStatus,
    SequelRelation,
    SeriesMembership,
    SyncCursor,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import Executable
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from meeplesync.domain.model import PipelineState


class SqlAlchemyCatalogEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CatalogEntry) -> None:
        self.session.add(entity)

    def get(self, entry_id: UUID) -> CatalogEntry | None:
        return self.session.get(CatalogEntry, entry_id)

    def get_by_bgg_id(self, bgg_id: int) -> CatalogEntry | None:
        stmt = select(CatalogEntry).where(catalog_entry_table.c.bgg_id == bgg_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_state(
        self,
        state: PipelineState,
        *,
        limit: int | None = None,
    ) -> list[CatalogEntry]:
        stmt = (
            select(CatalogEntry)
            .where(catalog_entry_table.c.pipeline_state == state)
            .order_by(catalog_entry_table.c.created_at, catalog_entry_table.c.bgg_id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def compare_and_set_state(
        self,
        entry_id: UUID,
        *,
        expected: PipelineState,
        target: PipelineState,
        error: str | None,
        processed_at: datetime,
    ) -> bool:
        stmt = (
            update(catalog_entry_table)
            .where(catalog_entry_table.c.id == entry_id)
            .where(catalog_entry_table.c.pipeline_state == expected)
            .values(pipeline_state=target, pipeline_error=error, last_processed_at=processed_at)
        )
        return _rowcount(self.session, stmt) == 1

    def apply_content(
        self,
        bgg_id: int,
        *,
        updated_at: datetime,
        completeness: dict[str, Any] | None,
        tagline: str | None,
        description: str | None,
    ) -> bool:
        table = catalog_entry_table
        values: dict[str, Any] = {"content_updated_at": updated_at}
        if completeness is not None:
            values["content_completeness"] = completeness
        stmt = (
            update(table)
            .where(table.c.bgg_id == bgg_id)
            .where(
                or_(table.c.content_updated_at.is_(None), table.c.content_updated_at < updated_at)
            )
            .values(**values)
        )
        if _rowcount(self.session, stmt) != 1:
            return False

        for column, value in (("tagline", tagline), ("description", description)):
            if value:
                fill = (
                    update(table)
                    .where(table.c.bgg_id == bgg_id)
                    .where(table.c[column].is_(None))
                    .values({column: value})
                )
                self.session.execute(fill)
        return True

    def count_with_content(self) -> int:
        stmt = select(func.count()).where(catalog_entry_table.c.content_updated_at.is_not(None))
        return self.session.execute(stmt).scalar_one()

    def count_without_content(self) -> int:
        stmt = select(func.count()).where(catalog_entry_table.c.content_updated_at.is_(None))
        return self.session.execute(stmt).scalar_one()


class SqlAlchemyRelationRepository:
    """Sequel relations and series memberships, written with insert-or-ignore."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_sequels(self, relations: Iterable[SequelRelation]) -> int:
        inserted = 0
        for relation in relations:
            stmt = (
                sequel_relation_table.insert()
                .prefix_with("OR IGNORE")
                .values(
                    subject_bgg_id=relation.subject_bgg_id,
                    kind=relation.kind,
                    object_bgg_id=relation.object_bgg_id,
                    object_label=relation.object_label,
                )
            )
            inserted += _rowcount(self.session, stmt)
        return inserted

    def sequels_for(self, bgg_id: int) -> list[SequelRelation]:
        table = sequel_relation_table
        stmt = (
            select(
                table.c.subject_bgg_id,
                table.c.kind,
                table.c.object_bgg_id,
                table.c.object_label,
            )
            .where(table.c.subject_bgg_id == bgg_id)
            .order_by(table.c.kind, table.c.object_bgg_id)
        )
        return [
            SequelRelation(subject, kind, obj, label)
            for subject, kind, obj, label in self.session.execute(stmt).all()
        ]

    def add_series(self, entry_id: UUID, memberships: Iterable[SeriesMembership]) -> int:
        inserted = 0
        for membership in memberships:
            stmt = (
                series_membership_table.insert()
                .prefix_with("OR IGNORE")
                .values(
                    entry_id=entry_id,
                    series_id=membership.series_id,
                    series_label=membership.series_label,
                )
            )
            inserted += _rowcount(self.session, stmt)
        return inserted

    def series_for(self, entry_id: UUID) -> list[SeriesMembership]:
        table = series_membership_table
        stmt = (
            select(table.c.series_id, table.c.series_label)
            .where(table.c.entry_id == entry_id)
            .order_by(table.c.series_id)
        )
        rows = self.session.execute(stmt).all()
        return [SeriesMembership(series_id, label) for series_id, label in rows]


class SqlAlchemyImportQueueRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ImportQueueItem) -> None:
        self.session.add(entity)

    def get_by_bgg_id(self, bgg_id: int) -> ImportQueueItem | None:
        stmt = select(ImportQueueItem).where(import_queue_table.c.bgg_id == bgg_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def next_pending(self, limit: int) -> list[ImportQueueItem]:
        stmt = (
            select(ImportQueueItem)
            .where(import_queue_table.c.status == QueueStatus.PENDING)
            .order_by(import_queue_table.c.priority, import_queue_table.c.created_at)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemySyncCursorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> SyncCursor | None:
        return self.session.get(SyncCursor, key)

    def save(self, cursor: SyncCursor) -> None:
        self.session.merge(cursor)


def _rowcount(session: Session, stmt: Executable) -> int:
    result = cast("CursorResult[Any]", session.execute(stmt))
    return result.rowcount


if TYPE_CHECKING:
    from meeplesync.domain.ports.persistence import (
        CatalogEntryRepository,
        ImportQueueRepository,
        RelationRepository,
        SyncCursorRepository,
    )

    _session_stub = cast("Session", object())
    _entry_repo: CatalogEntryRepository = SqlAlchemyCatalogEntryRepository(_session_stub)
    _relation_repo: RelationRepository = SqlAlchemyRelationRepository(_session_stub)
    _queue_repo: ImportQueueRepository = SqlAlchemyImportQueueRepository(_session_stub)
    _cursor_repo: SyncCursorRepository = SqlAlchemySyncCursorRepository(_session_stub)
