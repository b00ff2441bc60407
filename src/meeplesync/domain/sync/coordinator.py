"""Entry point for importing and re-syncing catalog entries.

One run: primary fetch, field apply, parallel enrichment, merge apply, then the automatic
pipeline transitions. Runs are serialised per primary-catalog ID by an in-process guard; the
state machine's conditional update covers other processes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.domain.enrichment.errors import AdapterError, TimedOutError
from meeplesync.domain.model import PRIMARY_SOURCE, Actor, CatalogEntry, PipelineState
from meeplesync.domain.pipeline import PipelineStateMachine, TransitionResult
from meeplesync.domain.sync.apply import (
    apply_merged,
    apply_primary_record,
    sequel_relations,
    series_memberships,
)
from meeplesync.domain.sync.guard import EntryGuard

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from meeplesync.domain.enrichment.candidates import PrimaryRecord
    from meeplesync.domain.enrichment.merge import MergedEnrichment
    from meeplesync.domain.enrichment.orchestrator import (
        EnrichmentOrchestrator,
        OrchestrationDiagnostics,
    )
    from meeplesync.domain.model import Source
    from meeplesync.domain.ports.sources import PrimaryCatalogSource
    from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)

# States whose fields are refreshed by a re-sync without re-entering the import sequence.
_REFRESH_ONLY = frozenset(
    {
        PipelineState.RULEBOOK_PENDING,
        PipelineState.RULEBOOK_READY,
        PipelineState.PENDING_REVIEW,
        PipelineState.PUBLISHED,
    }
)


@dataclass(slots=True)
class SyncOutcome:
    """What one import or re-sync did to one entry."""

    bgg_id: int
    entry_id: UUID | None = None
    succeeded: bool = False
    rejected: bool = False
    degraded: bool = False
    state: PipelineState | None = None
    error: str | None = None
    changed_fields: list[str] = field(default_factory=list[str])
    relations_added: int = 0
    rate_limit_hints: dict[Source, float | None] = field(default_factory=dict)
    diagnostics: OrchestrationDiagnostics | None = None


@dataclass(frozen=True, slots=True)
class _Snapshot:
    id: UUID
    bgg_id: int
    state: PipelineState
    wikipedia_url: str | None


class _TransitionRejected(Exception):
    def __init__(self, result: TransitionResult) -> None:
        super().__init__(result.reason)
        self.result = result


class SyncCoordinator:
    def __init__(
        self,
        *,
        primary: PrimaryCatalogSource,
        orchestrator: EnrichmentOrchestrator,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        primary_timeout: float,
        state_machine: PipelineStateMachine | None = None,
        guard: EntryGuard | None = None,
    ) -> None:
        self._primary = primary
        self._orchestrator = orchestrator
        self._unit_of_work_factory = unit_of_work_factory
        self._primary_timeout = primary_timeout
        self._state_machine = state_machine or PipelineStateMachine(unit_of_work_factory)
        self._guard = guard or EntryGuard()

    # sync wrappers: each call drives its own event loop

    def import_entry(self, bgg_id: int) -> SyncOutcome:
        return asyncio.run(self.import_entry_async(bgg_id))

    def resync_entry(self, entry_id: UUID) -> SyncOutcome:
        return asyncio.run(self.resync_entry_async(entry_id))

    def request_transition(
        self,
        entry_id: UUID,
        target: PipelineState,
        *,
        actor: Actor,
        error: str | None = None,
        clear_error: bool = True,
    ) -> TransitionResult:
        """External transition requests (document availability, review decisions)."""

        return self._state_machine.transition(
            entry_id, target, actor=actor, error=error, clear_error=clear_error
        )

    async def import_entry_async(self, bgg_id: int) -> SyncOutcome:
        """Import an entry by primary-catalog ID; re-syncs it when it is already catalogued."""

        with self._guard.hold(bgg_id) as acquired:
            if not acquired:
                return self._rejected_in_flight(bgg_id)

            with self._unit_of_work_factory() as uow:
                existing = uow.repositories.entries.get_by_bgg_id(bgg_id)
                if existing is None:
                    entry = CatalogEntry(bgg_id=bgg_id)
                    uow.repositories.entries.add(entry)
                    uow.commit()
                    snapshot = _Snapshot(entry.id, bgg_id, entry.pipeline_state, None)
                    is_new = True
                else:
                    snapshot = _snapshot(existing)
                    is_new = False

            if is_new:
                log.info("Importing %s as entry %s", bgg_id, snapshot.id)
            else:
                log.info("%s is already catalogued as %s; re-syncing", bgg_id, snapshot.id)
            return await self._run(snapshot, is_new=is_new)

    async def resync_entry_async(self, entry_id: UUID) -> SyncOutcome:
        with self._unit_of_work_factory() as uow:
            entry = uow.repositories.entries.get(entry_id)
            bgg_id = entry.bgg_id if entry is not None else None
        if bgg_id is None:
            msg = f"Catalog entry {entry_id} does not exist"
            raise LookupError(msg)

        with self._guard.hold(bgg_id) as acquired:
            if not acquired:
                return self._rejected_in_flight(bgg_id, entry_id)
            snapshot = self._load(entry_id)
            return await self._run(snapshot, is_new=False)

    async def _run(self, snapshot: _Snapshot, *, is_new: bool) -> SyncOutcome:
        outcome = SyncOutcome(bgg_id=snapshot.bgg_id, entry_id=snapshot.id, state=snapshot.state)
        state = snapshot.state
        if state is PipelineState.ARCHIVED:
            outcome.rejected = True
            outcome.error = "archived entries are not re-synced"
            log.warning("Skipping entry %s: %s", snapshot.id, outcome.error)
            return outcome

        try:
            if state in {PipelineState.PENDING, PipelineState.ERROR}:
                state = self._advance(snapshot.id, state, PipelineState.IMPORTING)
            outcome.state = state

            record = await self._fetch_primary(snapshot, state, outcome)
            if record is None:
                return outcome

            outcome.changed_fields.extend(self._apply_primary(snapshot.id, record))
            if state is PipelineState.IMPORTING:
                state = self._advance(snapshot.id, state, PipelineState.ENRICHING)
                outcome.state = state

            run = await self._orchestrator.enrich(
                record, record.hints(wikipedia_url=snapshot.wikipedia_url)
            )
            merged = run.merged
            outcome.diagnostics = run.diagnostics
            outcome.rate_limit_hints = dict(run.rate_limit_hints)
            outcome.degraded = merged.degraded
            for source, retry_after in run.rate_limit_hints.items():
                log.warning("%s is rate limited (retry after %s s)", source, retry_after)

            changed, added, has_rulebook, had_enrichment = self._apply_merged(
                snapshot.id, record, merged
            )
            outcome.changed_fields.extend(changed)
            outcome.relations_added = added

            state = self._follow_automatic_edges(
                snapshot.id,
                state,
                merged,
                has_rulebook=has_rulebook,
                had_enrichment=had_enrichment,
                is_new=is_new,
            )
            outcome.state = state
        except _TransitionRejected as exc:
            outcome.state = exc.result.state
            outcome.error = exc.result.reason
            return outcome

        outcome.succeeded = True
        log.info(
            "Synced %s (entry %s): state=%s, changed=%s, relations_added=%s%s",
            snapshot.bgg_id,
            snapshot.id,
            outcome.state,
            outcome.changed_fields,
            outcome.relations_added,
            ", degraded" if outcome.degraded else "",
        )
        return outcome

    async def _fetch_primary(
        self,
        snapshot: _Snapshot,
        state: PipelineState,
        outcome: SyncOutcome,
    ) -> PrimaryRecord | None:
        try:
            async with asyncio.timeout(self._primary_timeout):
                return await self._primary.fetch_record(
                    snapshot.bgg_id, timeout=self._primary_timeout
                )
        except TimeoutError:
            failure: AdapterError = TimedOutError(
                PRIMARY_SOURCE, f"timed out after {self._primary_timeout:.1f}s"
            )
        except AdapterError as exc:
            failure = exc

        outcome.error = str(failure)
        log.warning("Primary fetch failed for %s: %s", snapshot.bgg_id, failure)
        if state is PipelineState.PUBLISHED:
            return None
        outcome.state = self._advance(snapshot.id, state, PipelineState.ERROR, error=str(failure))
        return None

    def _follow_automatic_edges(
        self,
        entry_id: UUID,
        state: PipelineState,
        merged: MergedEnrichment,
        *,
        has_rulebook: bool,
        had_enrichment: bool,
        is_new: bool,
    ) -> PipelineState:
        if state is PipelineState.ENRICHING:
            if merged.degraded and is_new:
                log.warning(
                    "Every secondary source failed for new entry %s; leaving it in %s",
                    entry_id,
                    state,
                )
                return state
            target = (
                PipelineState.RULEBOOK_READY if has_rulebook else PipelineState.RULEBOOK_PENDING
            )
            state = self._advance(entry_id, state, target)

        if state is PipelineState.RULEBOOK_READY and (
            merged.any_source_succeeded or had_enrichment
        ):
            state = self._advance(entry_id, state, PipelineState.PENDING_REVIEW)
        return state

    def _advance(
        self,
        entry_id: UUID,
        current: PipelineState,
        target: PipelineState,
        *,
        error: str | None = None,
    ) -> PipelineState:
        result = self._state_machine.transition(
            entry_id, target, actor=Actor.PIPELINE, expected=current, error=error
        )
        if not result.accepted:
            raise _TransitionRejected(result)
        return target

    def _apply_primary(self, entry_id: UUID, record: PrimaryRecord) -> list[str]:
        with self._unit_of_work_factory() as uow:
            entry = _require(uow, entry_id)
            changed = apply_primary_record(entry, record)
            uow.commit()
        return changed

    def _apply_merged(
        self,
        entry_id: UUID,
        record: PrimaryRecord,
        merged: MergedEnrichment,
    ) -> tuple[list[str], int, bool, bool]:
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            entry = _require(uow, entry_id)
            had_enrichment = entry.has_enrichment()
            changed = apply_merged(entry, merged)
            added = repositories.relations.add_sequels(
                sequel_relations(record.bgg_id, record.name, merged)
            )
            added += repositories.relations.add_series(entry_id, series_memberships(merged))
            has_rulebook = entry.has_rulebook
            uow.commit()
        return changed, added, has_rulebook, had_enrichment

    def _load(self, entry_id: UUID) -> _Snapshot:
        with self._unit_of_work_factory() as uow:
            return _snapshot(_require(uow, entry_id))

    @staticmethod
    def _rejected_in_flight(bgg_id: int, entry_id: UUID | None = None) -> SyncOutcome:
        log.warning("A sync for %s is already in progress; rejecting this request", bgg_id)
        return SyncOutcome(
            bgg_id=bgg_id,
            entry_id=entry_id,
            rejected=True,
            error="sync already in progress",
        )


def _require(uow: CatalogUnitOfWork, entry_id: UUID) -> CatalogEntry:
    entry = uow.repositories.entries.get(entry_id)
    if entry is None:
        msg = f"Catalog entry {entry_id} disappeared during sync"
        raise LookupError(msg)
    return entry


def _snapshot(entry: CatalogEntry) -> _Snapshot:
    return _Snapshot(entry.id, entry.bgg_id, entry.pipeline_state, entry.wikipedia_url)
