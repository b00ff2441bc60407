"""Parallel fan-out to the secondary sources."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.domain.enrichment.candidates import EnrichmentCandidate
from meeplesync.domain.enrichment.errors import (
    AdapterError,
    FailureKind,
    RateLimitedError,
    TimedOutError,
    TransientError,
)
from meeplesync.domain.enrichment.merge import (
    MergedEnrichment,
    encyclopedia_fallback_url,
    merge_enrichment,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

    from meeplesync.domain.enrichment.candidates import IdentityHints, PrimaryRecord
    from meeplesync.domain.model import Source
    from meeplesync.domain.ports.sources import ArticleFetcher, SourceAdapter

log = getLogger(__name__)


class AdapterStatus(StrEnum):
    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True, slots=True)
class AdapterTiming:
    source: Source
    status: AdapterStatus
    elapsed_seconds: float
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class OrchestrationDiagnostics:
    total_seconds: float
    adapters: tuple[AdapterTiming, ...]
    fallback_used: bool = False

    def by_status(self, status: AdapterStatus) -> tuple[Source, ...]:
        return tuple(timing.source for timing in self.adapters if timing.status is status)


@dataclass(frozen=True, slots=True)
class EnrichmentRun:
    merged: MergedEnrichment
    candidates: tuple[EnrichmentCandidate, ...]
    diagnostics: OrchestrationDiagnostics
    rate_limit_hints: dict[Source, float | None] = field(default_factory=dict)


class EnrichmentOrchestrator:
    """Run every secondary adapter concurrently and merge whatever comes back in time.

    Each adapter call gets ``adapter_timeout`` seconds; the whole fan-out gets ``deadline``
    seconds. Calls still running at the deadline are cancelled and counted as transient
    failures. Rate-limited sources are not retried here; their retry-after hints are handed
    back to the caller.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        *,
        adapter_timeout: float,
        deadline: float,
        article_fetcher: ArticleFetcher | None = None,
    ) -> None:
        self._adapters = tuple(adapters)
        self._adapter_timeout = adapter_timeout
        self._deadline = deadline
        self._article_fetcher = article_fetcher

    @property
    def sources(self) -> tuple[Source, ...]:
        return tuple(adapter.source for adapter in self._adapters)

    async def enrich(self, primary: PrimaryRecord, hints: IdentityHints) -> EnrichmentRun:
        started = time.perf_counter()
        candidates = await self._fan_out(hints)

        fallback_used = False
        fallback_url = encyclopedia_fallback_url(candidates)
        remaining = self._deadline - (time.perf_counter() - started)
        if fallback_url is not None and self._article_fetcher is not None and remaining > 0:
            fallback_used = True
            log.info("Retrying encyclopedia for %s via %s", primary.bgg_id, fallback_url)
            timeout = min(self._adapter_timeout, remaining)
            fallback = await self._call(
                self._article_fetcher.source,
                self._article_fetcher.fetch_article(fallback_url, hints, timeout=timeout),
                timeout=timeout,
            )
            candidates = [c for c in candidates if c.source is not fallback.source] + [fallback]

        merged = merge_enrichment(primary, candidates)
        diagnostics = OrchestrationDiagnostics(
            total_seconds=time.perf_counter() - started,
            adapters=tuple(_timing(candidate) for candidate in candidates),
            fallback_used=fallback_used,
        )
        hints_by_source = {
            candidate.error.source: candidate.error.retry_after
            for candidate in candidates
            if isinstance(candidate.error, RateLimitedError)
        }
        _log_diagnostics(primary.bgg_id, diagnostics)
        return EnrichmentRun(
            merged=merged,
            candidates=tuple(candidates),
            diagnostics=diagnostics,
            rate_limit_hints=hints_by_source,
        )

    async def _fan_out(self, hints: IdentityHints) -> list[EnrichmentCandidate]:
        if not self._adapters:
            return []

        tasks: dict[asyncio.Task[EnrichmentCandidate], SourceAdapter] = {}
        for adapter in self._adapters:
            task = asyncio.create_task(
                self._call(
                    adapter.source,
                    adapter.fetch(hints, timeout=self._adapter_timeout),
                    timeout=self._adapter_timeout,
                ),
                name=f"enrich-{adapter.source}",
            )
            tasks[task] = adapter

        started = time.perf_counter()
        done, pending = await asyncio.wait(tasks, timeout=self._deadline)
        waited = time.perf_counter() - started

        candidates = [task.result() for task in done]
        for task in pending:
            task.cancel()
            source = tasks[task].source
            error = TimedOutError(source, "enrichment deadline exceeded")
            candidates.append(EnrichmentCandidate.failure(error, elapsed_seconds=waited))
        return candidates

    @staticmethod
    async def _call(
        source: Source,
        call: Awaitable[EnrichmentCandidate],
        *,
        timeout: float,
    ) -> EnrichmentCandidate:
        started = time.perf_counter()
        try:
            async with asyncio.timeout(timeout):
                candidate = await call
        except TimeoutError:
            error = TimedOutError(source, f"timed out after {timeout:.1f}s")
            return EnrichmentCandidate.failure(error, elapsed_seconds=time.perf_counter() - started)
        except AdapterError as exc:
            return EnrichmentCandidate.failure(exc, elapsed_seconds=time.perf_counter() - started)
        except Exception as exc:
            log.exception("Unexpected failure in %s adapter", source)
            error = TransientError(source, f"unexpected {type(exc).__name__}: {exc}")
            return EnrichmentCandidate.failure(error, elapsed_seconds=time.perf_counter() - started)
        return candidate.with_elapsed(time.perf_counter() - started)


def _timing(candidate: EnrichmentCandidate) -> AdapterTiming:
    error = candidate.error
    if error is None:
        status = AdapterStatus.SUCCEEDED
    elif error.kind is FailureKind.NOT_FOUND:
        status = AdapterStatus.NOT_FOUND
    elif isinstance(error, TimedOutError):
        status = AdapterStatus.TIMED_OUT
    else:
        status = AdapterStatus.FAILED
    detail = str(error) if error is not None else None
    return AdapterTiming(candidate.source, status, candidate.elapsed_seconds, detail)


def _log_diagnostics(bgg_id: int, diagnostics: OrchestrationDiagnostics) -> None:
    per_adapter = ", ".join(
        f"{timing.source}={timing.status}:{timing.elapsed_seconds:.2f}s"
        for timing in sorted(diagnostics.adapters, key=lambda timing: timing.source)
    )
    log.info(
        "Enrichment for %s finished in %.2fs [%s]%s",
        bgg_id,
        diagnostics.total_seconds,
        per_adapter,
        " (encyclopedia fallback)" if diagnostics.fallback_used else "",
    )
    for timing in diagnostics.adapters:
        if timing.status in {AdapterStatus.FAILED, AdapterStatus.TIMED_OUT}:
            log.warning("Enrichment source %s for %s: %s", timing.source, bgg_id, timing.detail)
