"""The per-entry pipeline state machine.

The graph is fixed. ``plan_transition`` is the pure legality check; ``PipelineStateMachine``
persists accepted transitions through a conditional update keyed on the expected current
state, so a request that loses a race is rejected instead of overwriting newer state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from meeplesync.domain.model import Actor, PipelineState, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)

type Clock = Callable[[], datetime]

_PIPELINE: Final = frozenset({Actor.PIPELINE})
_EXTERNAL_DOCUMENT: Final = frozenset({Actor.DOCUMENTS, Actor.REVIEWER})
_REVIEWER: Final = frozenset({Actor.REVIEWER})

_ERROR_SOURCES: Final = (
    PipelineState.PENDING,
    PipelineState.IMPORTING,
    PipelineState.ENRICHING,
    PipelineState.RULEBOOK_PENDING,
    PipelineState.RULEBOOK_READY,
    PipelineState.PENDING_REVIEW,
)


def _build_graph() -> Mapping[PipelineState, Mapping[PipelineState, frozenset[Actor]]]:
    graph: dict[PipelineState, dict[PipelineState, frozenset[Actor]]] = {
        state: {} for state in PipelineState
    }
    graph[PipelineState.PENDING][PipelineState.IMPORTING] = _PIPELINE
    graph[PipelineState.IMPORTING][PipelineState.ENRICHING] = _PIPELINE
    graph[PipelineState.ENRICHING][PipelineState.RULEBOOK_PENDING] = _PIPELINE
    graph[PipelineState.ENRICHING][PipelineState.RULEBOOK_READY] = _PIPELINE
    graph[PipelineState.RULEBOOK_PENDING][PipelineState.RULEBOOK_READY] = _EXTERNAL_DOCUMENT
    graph[PipelineState.RULEBOOK_READY][PipelineState.PENDING_REVIEW] = _PIPELINE
    graph[PipelineState.PENDING_REVIEW][PipelineState.PUBLISHED] = _REVIEWER
    graph[PipelineState.PUBLISHED][PipelineState.ARCHIVED] = _REVIEWER
    graph[PipelineState.ERROR][PipelineState.IMPORTING] = _PIPELINE
    for state in _ERROR_SOURCES:
        graph[state][PipelineState.ERROR] = _PIPELINE
    return MappingProxyType({state: MappingProxyType(edges) for state, edges in graph.items()})


TRANSITIONS: Final = _build_graph()


class IllegalTransitionError(ValueError):
    """Raised when a requested transition is not an edge of the pipeline graph."""

    def __init__(self, current: PipelineState, target: PipelineState, reason: str) -> None:
        super().__init__(f"{current} -> {target}: {reason}")
        self.current = current
        self.target = target
        self.reason = reason


@dataclass(frozen=True, slots=True)
class TransitionPlan:
    current: PipelineState
    target: PipelineState
    error: str | None


@dataclass(frozen=True, slots=True)
class TransitionResult:
    accepted: bool
    previous: PipelineState | None
    state: PipelineState | None
    error: str | None = None
    reason: str | None = None


def allowed_targets(current: PipelineState, actor: Actor) -> tuple[PipelineState, ...]:
    return tuple(target for target, actors in TRANSITIONS[current].items() if actor in actors)


def is_legal(current: PipelineState, target: PipelineState, actor: Actor) -> bool:
    return actor in TRANSITIONS[current].get(target, frozenset())


def plan_transition(
    current: PipelineState,
    target: PipelineState,
    *,
    actor: Actor,
    error: str | None = None,
    existing_error: str | None = None,
    clear_error: bool = True,
) -> TransitionPlan:
    """Validate a transition and compute the error message the entry ends up with."""

    edge = TRANSITIONS[current].get(target)
    if edge is None:
        raise IllegalTransitionError(current, target, "not an edge of the pipeline graph")
    if actor not in edge:
        raise IllegalTransitionError(current, target, f"not permitted for actor {actor}")

    if target is PipelineState.ERROR:
        if not error:
            raise IllegalTransitionError(current, target, "an error message is required")
        return TransitionPlan(current, target, error)
    if current is PipelineState.ERROR or clear_error:
        return TransitionPlan(current, target, None)
    return TransitionPlan(current, target, existing_error)


class PipelineStateMachine:
    """Persists pipeline transitions; the only writer of ``pipeline_state``."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    def transition(
        self,
        entry_id: UUID,
        target: PipelineState,
        *,
        actor: Actor,
        expected: PipelineState | None = None,
        error: str | None = None,
        clear_error: bool = True,
    ) -> TransitionResult:
        """Move an entry to ``target`` if that is a legal edge from its current state.

        With ``expected`` the move only happens when the entry is still in that state.
        Rejections leave the entry untouched and are reported, never raised.
        """

        with self._unit_of_work_factory() as uow:
            entries = uow.repositories.entries
            entry = entries.get(entry_id)
            if entry is None:
                return TransitionResult(False, None, None, reason="entry not found")
            current = entry.pipeline_state
            if expected is not None and current is not expected:
                reason = f"expected {expected}, found {current}"
                return self._reject(entry_id, current, target, entry.pipeline_error, reason)
            try:
                plan = plan_transition(
                    current,
                    target,
                    actor=actor,
                    error=error,
                    existing_error=entry.pipeline_error,
                    clear_error=clear_error,
                )
            except IllegalTransitionError as exc:
                return self._reject(entry_id, current, target, entry.pipeline_error, exc.reason)

            applied = entries.compare_and_set_state(
                entry_id,
                expected=plan.current,
                target=plan.target,
                error=plan.error,
                processed_at=self._clock(),
            )
            if not applied:
                uow.rollback()
                reason = "state changed concurrently"
                return self._reject(entry_id, current, target, entry.pipeline_error, reason)
            uow.commit()

        log.info("Entry %s: %s -> %s (%s)", entry_id, plan.current, plan.target, actor)
        return TransitionResult(True, plan.current, plan.target, error=plan.error)

    @staticmethod
    def _reject(
        entry_id: UUID,
        current: PipelineState,
        target: PipelineState,
        error: str | None,
        reason: str,
    ) -> TransitionResult:
        log.warning(
            "Rejected transition for entry %s: %s -> %s (%s)", entry_id, current, target, reason
        )
        return TransitionResult(False, current, current, error=error, reason=reason)
