from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import sessionmaker

from meeplesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogEntryRepository,
    SqlAlchemyImportQueueRepository,
    SqlAlchemyRelationRepository,
    SqlAlchemySyncCursorRepository,
)
from meeplesync.domain.model import (
    CatalogEntry,
    ImportQueueItem,
    PipelineState,
    QueueStatus,
    RelationKind,
    SequelRelation,
    SeriesMembership,
    SyncCursor,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def _entry(bgg_id: int, **kwargs: object) -> CatalogEntry:
    return CatalogEntry(bgg_id=bgg_id, name=f"Game {bgg_id}", **kwargs)  # type: ignore[arg-type]


def test_entry_round_trip_by_id_and_bgg_id(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogEntryRepository(sqlite_session)
    entry = _entry(
        174430,
        designers=["Isaac Childres"],
        publishers=["Cephalofair Games"],
        series_families=["Gloomhaven"],
        category_slugs=["adventure"],
    )
    repo.add(entry)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    by_id = repo.get(entry.id)
    by_bgg_id = repo.get_by_bgg_id(174430)

    assert by_id is not None
    assert by_bgg_id is not None
    assert by_id.id == by_bgg_id.id == entry.id
    assert by_id.designers == ["Isaac Childres"]
    assert by_id.category_slugs == ["adventure"]
    assert by_id.publishers == ["Cephalofair Games"]
    assert by_id.series_families == ["Gloomhaven"]
    assert by_id.kind == "boardgame"
    assert by_id.alternate_names == []
    assert by_id.pipeline_state is PipelineState.PENDING
    assert by_id.created_at.tzinfo is not None
    assert repo.get_by_bgg_id(1) is None


def test_compare_and_set_state_only_applies_from_expected_state(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogEntryRepository(sqlite_session)
    entry = _entry(13)
    repo.add(entry)
    sqlite_session.commit()
    now = datetime(2025, 1, 1, tzinfo=UTC)

    stale = repo.compare_and_set_state(
        entry.id,
        expected=PipelineState.ENRICHING,
        target=PipelineState.RULEBOOK_PENDING,
        error=None,
        processed_at=now,
    )
    applied = repo.compare_and_set_state(
        entry.id,
        expected=PipelineState.PENDING,
        target=PipelineState.IMPORTING,
        error=None,
        processed_at=now,
    )
    sqlite_session.commit()
    sqlite_session.expunge_all()

    assert stale is False
    assert applied is True
    stored = repo.get(entry.id)
    assert stored is not None
    assert stored.pipeline_state is PipelineState.IMPORTING
    assert stored.last_processed_at == now


def test_list_by_state_orders_by_creation(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogEntryRepository(sqlite_session)
    start = datetime(2025, 1, 1, tzinfo=UTC)
    repo.add(_entry(3, created_at=start + timedelta(minutes=2)))
    repo.add(_entry(1, created_at=start + timedelta(minutes=1)))
    repo.add(_entry(2, created_at=start, pipeline_state=PipelineState.ERROR))
    sqlite_session.commit()

    pending = repo.list_by_state(PipelineState.PENDING)

    assert [entry.bgg_id for entry in pending] == [1, 3]
    assert [entry.bgg_id for entry in repo.list_by_state(PipelineState.PENDING, limit=1)] == [1]


def test_content_counts(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogEntryRepository(sqlite_session)
    repo.add(_entry(1, content_updated_at=datetime(2025, 1, 1, tzinfo=UTC)))
    repo.add(_entry(2))
    repo.add(_entry(3))
    sqlite_session.commit()

    assert repo.count_with_content() == 1
    assert repo.count_without_content() == 2


def test_apply_content_keeps_text_written_after_the_entry_was_loaded(
    sqlite_engine: Engine,
) -> None:
    sessions = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    with sessions() as setup:
        setup.add(_entry(13))
        setup.commit()

    with sessions() as syncing, sessions() as enriching:
        loaded = SqlAlchemyCatalogEntryRepository(syncing).get_by_bgg_id(13)
        assert loaded is not None
        assert loaded.tagline is None

        concurrent = SqlAlchemyCatalogEntryRepository(enriching).get_by_bgg_id(13)
        assert concurrent is not None
        concurrent.tagline = "Enriched tagline"
        enriching.commit()

        applied = SqlAlchemyCatalogEntryRepository(syncing).apply_content(
            13,
            updated_at=datetime(2025, 3, 1, tzinfo=UTC),
            completeness={"tagline": True},
            tagline="Curated tagline",
            description="Curated description",
        )
        syncing.commit()

    with sessions() as check:
        stored = SqlAlchemyCatalogEntryRepository(check).get_by_bgg_id(13)
        assert stored is not None
        assert applied
        assert stored.tagline == "Enriched tagline"
        assert stored.description == "Curated description"
        assert stored.content_updated_at == datetime(2025, 3, 1, tzinfo=UTC)
        assert stored.content_completeness == {"tagline": True}


def test_apply_content_skips_content_that_is_not_newer(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogEntryRepository(sqlite_session)
    stored_at = datetime(2025, 3, 1, tzinfo=UTC)
    repo.add(_entry(13, content_updated_at=stored_at))
    sqlite_session.commit()

    for updated_at in (stored_at, stored_at - timedelta(days=1)):
        applied = repo.apply_content(
            13, updated_at=updated_at, completeness=None, tagline="T", description=None
        )
        assert not applied
    assert not repo.apply_content(
        404, updated_at=stored_at, completeness=None, tagline="T", description=None
    )


def test_sequel_relations_ignore_duplicates(sqlite_session: Session) -> None:
    repo = SqlAlchemyRelationRepository(sqlite_session)
    relation = SequelRelation(174430, RelationKind.PRECEDES, 295770, "Frosthaven")

    first = repo.add_sequels([relation, relation.inverse("Gloomhaven")])
    second = repo.add_sequels([relation])
    sqlite_session.commit()

    assert first == 2
    assert second == 0
    assert repo.sequels_for(174430) == [relation]
    assert repo.sequels_for(295770) == [
        SequelRelation(295770, RelationKind.FOLLOWS, 174430, "Gloomhaven")
    ]


def test_series_memberships_ignore_duplicates(sqlite_session: Session) -> None:
    entries = SqlAlchemyCatalogEntryRepository(sqlite_session)
    repo = SqlAlchemyRelationRepository(sqlite_session)
    entry = _entry(174430)
    entries.add(entry)
    sqlite_session.commit()

    inserted = repo.add_series(
        entry.id,
        [SeriesMembership("Q1", "Gloomhaven"), SeriesMembership("Q1", "Gloomhaven")],
    )

    assert inserted == 1
    assert repo.series_for(entry.id) == [SeriesMembership("Q1", "Gloomhaven")]


def test_next_pending_orders_by_priority_then_age(sqlite_session: Session) -> None:
    repo = SqlAlchemyImportQueueRepository(sqlite_session)
    start = datetime(2025, 1, 1, tzinfo=UTC)
    repo.add(ImportQueueItem(bgg_id=1, priority=3, created_at=start))
    repo.add(ImportQueueItem(bgg_id=2, priority=1, created_at=start + timedelta(minutes=5)))
    repo.add(ImportQueueItem(bgg_id=3, priority=1, created_at=start + timedelta(minutes=1)))
    repo.add(ImportQueueItem(bgg_id=4, priority=0, status=QueueStatus.COMPLETED))
    sqlite_session.commit()

    assert [item.bgg_id for item in repo.next_pending(10)] == [3, 2, 1]
    assert [item.bgg_id for item in repo.next_pending(1)] == [3]
    found = repo.get_by_bgg_id(4)
    assert found is not None
    assert found.status is QueueStatus.COMPLETED


def test_sync_cursor_save_replaces_value(sqlite_session: Session) -> None:
    repo = SqlAlchemySyncCursorRepository(sqlite_session)
    repo.save(SyncCursor(key="content_feed", cursor_value="2025-01-01T00:00:00.000Z"))
    sqlite_session.commit()
    repo.save(
        SyncCursor(
            key="content_feed",
            cursor_value="2025-02-01T00:00:00.000Z",
            run_metadata={"processed": 2},
        )
    )
    sqlite_session.commit()
    sqlite_session.expunge_all()

    cursor = repo.get("content_feed")

    assert cursor is not None
    assert cursor.cursor_value == "2025-02-01T00:00:00.000Z"
    assert cursor.run_metadata == {"processed": 2}
    assert repo.get("missing") is None
