"""Ports for the external data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from meeplesync.domain.enrichment.candidates import (
        EnrichmentCandidate,
        IdentityHints,
        PrimaryRecord,
    )
    from meeplesync.domain.model import Source


@runtime_checkable
class SourceAdapter(Protocol):
    """Uniform contract for the secondary sources.

    Implementations are stateless with respect to catalog entries, never block longer than
    ``timeout`` seconds, and raise a classified ``AdapterError`` on failure.
    """

    @property
    def source(self) -> Source: ...

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate: ...


@runtime_checkable
class ArticleFetcher(Protocol):
    """Encyclopedia lookup by known article URL, used for the one-off fallback fetch."""

    @property
    def source(self) -> Source: ...

    async def fetch_article(
        self,
        url: str,
        hints: IdentityHints,
        *,
        timeout: float,
    ) -> EnrichmentCandidate: ...


@runtime_checkable
class PrimaryCatalogSource(Protocol):
    async def fetch_record(self, bgg_id: int, *, timeout: float) -> PrimaryRecord: ...


@dataclass(frozen=True, slots=True)
class ContentFeedItem:
    bgg_id: int
    updated_at: datetime
    updated_at_raw: str
    tagline: str | None = None
    description: str | None = None
    completeness: Mapping[str, object] | None = None


@dataclass(frozen=True, slots=True)
class ContentFeedPage:
    items: tuple[ContentFeedItem, ...]
    has_more: bool = False


@runtime_checkable
class ContentFeed(Protocol):
    """Incremental feed of curated content, addressed by an opaque cursor."""

    def fetch_page(self, *, since: str, limit: int) -> ContentFeedPage: ...
