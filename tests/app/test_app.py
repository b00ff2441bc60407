from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from meeplesync import app
from meeplesync.adapters.wikipedia import WikipediaSource
from meeplesync.config.content_feed import CONTENT_FEED_CURSOR_KEY
from meeplesync.domain.model import CatalogEntry, PipelineState, Source
from meeplesync.domain.ports.sources import ContentFeedPage
from meeplesync.domain.sync import SyncCoordinator
from tests.helpers.catalog import (
    FakeContentFeed,
    FakePrimarySource,
    feed_item,
    make_record,
    orchestrator,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


def _coordinator(factory: UowFactory) -> SyncCoordinator:
    return SyncCoordinator(
        primary=FakePrimarySource(records={13: make_record(13, "Catan")}),
        orchestrator=orchestrator(),
        unit_of_work_factory=factory,
        primary_timeout=1.0,
    )


def test_secondary_adapters_skip_video_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)

    sources = [adapter.source for adapter in app.build_secondary_adapters()]

    assert sources == [Source.WIKIDATA, Source.WIKIPEDIA, Source.COMMONS]


def test_secondary_adapters_include_video_with_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOUTUBE_API_KEY", "test-key")

    adapters = app.build_secondary_adapters()

    assert [adapter.source for adapter in adapters][-1] is Source.YOUTUBE
    assert any(isinstance(adapter, WikipediaSource) for adapter in adapters)


def test_import_game_runs_the_coordinator(sqlite_unit_of_work: UowFactory) -> None:
    outcome = app.import_game(13, coordinator=_coordinator(sqlite_unit_of_work))

    assert outcome.succeeded
    assert outcome.state is PipelineState.ENRICHING


def test_queue_then_process(sqlite_unit_of_work: UowFactory) -> None:
    assert app.queue_game(13, name="Catan", unit_of_work_factory=sqlite_unit_of_work)
    assert not app.queue_game(13, unit_of_work_factory=sqlite_unit_of_work)

    result = app.process_import_queue(
        limit=5,
        coordinator=_coordinator(sqlite_unit_of_work),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert (result.attempted, result.imported) == (1, 1)


def test_queue_game_logs_why_a_game_was_not_queued(
    sqlite_unit_of_work: UowFactory, caplog: pytest.LogCaptureFixture
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.entries.add(CatalogEntry(bgg_id=13, name="Catan"))
        uow.commit()

    with caplog.at_level(logging.INFO, logger="meeplesync.app"):
        assert not app.queue_game(13, unit_of_work_factory=sqlite_unit_of_work)

    assert "BGG 13 not queued: already catalogued" in caplog.messages
    assert not any("already queued" in message for message in caplog.messages)


def test_sync_content_uses_the_default_cursor_key(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.entries.add(CatalogEntry(bgg_id=13, name="Catan"))
        uow.commit()
    feed = FakeContentFeed(
        pages=[ContentFeedPage(items=(feed_item(13, "2025-03-01T10:00:00.000Z", tagline="T"),))]
    )

    result = app.sync_content(feed=feed, limit=10, unit_of_work_factory=sqlite_unit_of_work)
    status = app.content_status(unit_of_work_factory=sqlite_unit_of_work)

    assert result.updated == 1
    assert feed.requests[0][1] == 10
    assert status.cursor == "2025-03-01T10:00:00.000Z"
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.sync_cursors.get(CONTENT_FEED_CURSOR_KEY) is not None
