from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from meeplesync.domain.model import Actor, CatalogEntry, PipelineState
from meeplesync.domain.pipeline import (
    IllegalTransitionError,
    PipelineStateMachine,
    allowed_targets,
    is_legal,
    plan_transition,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from meeplesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]

FIXED_NOW = datetime(2025, 6, 1, 12, tzinfo=UTC)


def _store(
    factory: UowFactory,
    state: PipelineState,
    *,
    error: str | None = None,
) -> UUID:
    entry = CatalogEntry(bgg_id=13, name="Catan", pipeline_state=state, pipeline_error=error)
    with factory() as uow:
        uow.repositories.entries.add(entry)
        uow.commit()
    return entry.id


def _load(factory: UowFactory, entry_id: UUID) -> CatalogEntry:
    with factory() as uow:
        entry = uow.repositories.entries.get(entry_id)
        assert entry is not None
        return entry


@pytest.mark.parametrize(
    ("current", "target", "actor"),
    [
        (PipelineState.PENDING, PipelineState.IMPORTING, Actor.PIPELINE),
        (PipelineState.IMPORTING, PipelineState.ENRICHING, Actor.PIPELINE),
        (PipelineState.ENRICHING, PipelineState.RULEBOOK_PENDING, Actor.PIPELINE),
        (PipelineState.ENRICHING, PipelineState.RULEBOOK_READY, Actor.PIPELINE),
        (PipelineState.RULEBOOK_PENDING, PipelineState.RULEBOOK_READY, Actor.DOCUMENTS),
        (PipelineState.RULEBOOK_PENDING, PipelineState.RULEBOOK_READY, Actor.REVIEWER),
        (PipelineState.RULEBOOK_READY, PipelineState.PENDING_REVIEW, Actor.PIPELINE),
        (PipelineState.PENDING_REVIEW, PipelineState.PUBLISHED, Actor.REVIEWER),
        (PipelineState.PUBLISHED, PipelineState.ARCHIVED, Actor.REVIEWER),
        (PipelineState.ERROR, PipelineState.IMPORTING, Actor.PIPELINE),
    ],
)
def test_legal_edges(current: PipelineState, target: PipelineState, actor: Actor) -> None:
    assert is_legal(current, target, actor)


@pytest.mark.parametrize(
    ("current", "target", "actor"),
    [
        (PipelineState.PENDING, PipelineState.PUBLISHED, Actor.REVIEWER),
        (PipelineState.RULEBOOK_PENDING, PipelineState.RULEBOOK_READY, Actor.PIPELINE),
        (PipelineState.PENDING_REVIEW, PipelineState.PUBLISHED, Actor.PIPELINE),
        (PipelineState.PUBLISHED, PipelineState.ERROR, Actor.PIPELINE),
        (PipelineState.ARCHIVED, PipelineState.IMPORTING, Actor.PIPELINE),
        (PipelineState.ERROR, PipelineState.ENRICHING, Actor.PIPELINE),
    ],
)
def test_illegal_edges(current: PipelineState, target: PipelineState, actor: Actor) -> None:
    assert not is_legal(current, target, actor)
    with pytest.raises(IllegalTransitionError):
        plan_transition(current, target, actor=actor, error="boom")


def test_archived_is_terminal() -> None:
    for actor in Actor:
        assert allowed_targets(PipelineState.ARCHIVED, actor) == ()


def test_error_transition_requires_a_message() -> None:
    with pytest.raises(IllegalTransitionError, match="error message"):
        plan_transition(PipelineState.ENRICHING, PipelineState.ERROR, actor=Actor.PIPELINE)

    plan = plan_transition(
        PipelineState.ENRICHING, PipelineState.ERROR, actor=Actor.PIPELINE, error="HTTP 503"
    )
    assert plan.error == "HTTP 503"


def test_leaving_error_always_clears_the_message() -> None:
    plan = plan_transition(
        PipelineState.ERROR,
        PipelineState.IMPORTING,
        actor=Actor.PIPELINE,
        existing_error="HTTP 503",
        clear_error=False,
    )
    assert plan.error is None


def test_other_transitions_may_keep_the_message() -> None:
    plan = plan_transition(
        PipelineState.RULEBOOK_PENDING,
        PipelineState.RULEBOOK_READY,
        actor=Actor.DOCUMENTS,
        existing_error="note",
        clear_error=False,
    )
    assert plan.error == "note"


def test_transition_persists_state_error_and_timestamp(sqlite_unit_of_work: UowFactory) -> None:
    entry_id = _store(sqlite_unit_of_work, PipelineState.ENRICHING)
    machine = PipelineStateMachine(sqlite_unit_of_work, clock=lambda: FIXED_NOW)

    result = machine.transition(
        entry_id, PipelineState.ERROR, actor=Actor.PIPELINE, error="HTTP 503"
    )

    assert result.accepted
    assert result.previous is PipelineState.ENRICHING
    assert result.state is PipelineState.ERROR
    stored = _load(sqlite_unit_of_work, entry_id)
    assert stored.pipeline_state is PipelineState.ERROR
    assert stored.pipeline_error == "HTTP 503"
    assert stored.last_processed_at == FIXED_NOW


def test_rejected_transition_leaves_entry_untouched(sqlite_unit_of_work: UowFactory) -> None:
    entry_id = _store(sqlite_unit_of_work, PipelineState.RULEBOOK_PENDING)
    machine = PipelineStateMachine(sqlite_unit_of_work)

    result = machine.transition(entry_id, PipelineState.PUBLISHED, actor=Actor.REVIEWER)

    assert not result.accepted
    assert result.state is PipelineState.RULEBOOK_PENDING
    assert result.reason == "not an edge of the pipeline graph"
    stored = _load(sqlite_unit_of_work, entry_id)
    assert stored.pipeline_state is PipelineState.RULEBOOK_PENDING
    assert stored.last_processed_at is None


def test_expected_state_mismatch_is_rejected(sqlite_unit_of_work: UowFactory) -> None:
    entry_id = _store(sqlite_unit_of_work, PipelineState.IMPORTING)
    machine = PipelineStateMachine(sqlite_unit_of_work)

    result = machine.transition(
        entry_id,
        PipelineState.RULEBOOK_PENDING,
        actor=Actor.PIPELINE,
        expected=PipelineState.ENRICHING,
    )

    assert not result.accepted
    assert result.reason == "expected enriching, found importing"


def test_unknown_entry_is_rejected(sqlite_unit_of_work: UowFactory) -> None:
    machine = PipelineStateMachine(sqlite_unit_of_work)

    result = machine.transition(
        CatalogEntry(bgg_id=1).id, PipelineState.IMPORTING, actor=Actor.PIPELINE
    )

    assert not result.accepted
    assert result.reason == "entry not found"
