"""Fakes and builders shared by the catalog pipeline tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx

from meeplesync.adapters.http_resilience import ResilientClient
from meeplesync.config.http_resilience import ResilienceConfig, RetryPolicy
from meeplesync.domain.enrichment import (
    EnrichmentCandidate,
    EnrichmentOrchestrator,
    FieldClaim,
    NotFoundError,
    PrimaryRecord,
    SequelLink,
)
from meeplesync.domain.model import Source
from meeplesync.domain.ports.sources import ContentFeedItem, ContentFeedPage

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from meeplesync.domain.enrichment import AdapterError, IdentityHints
    from meeplesync.domain.model import EnrichableField

type Handler = Callable[[httpx.Request], httpx.Response]


def resilience(name: str, base_url: str | None = None) -> ResilienceConfig:
    """A resilience config with no cache, throttle or retries."""

    return ResilienceConfig(
        name=name,
        base_url=base_url,
        retry=RetryPolicy(total=0),
        cache=None,
    )


def mock_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(config: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(config)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=config.base_url or "",
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


def make_record(
    bgg_id: int = 174430,
    name: str = "Gloomhaven",
    *,
    year: int | None = 2017,
    categories: Sequence[str] = ("Adventure", "Fantasy"),
    designers: Sequence[str] = ("Isaac Childres",),
) -> PrimaryRecord:
    return PrimaryRecord(
        bgg_id=bgg_id,
        name=name,
        year_published=year,
        designers=tuple(designers),
        categories=tuple(categories),
        mechanics=("Hand Management",),
        publishers=("Cephalofair Games",),
        series_families=(name,),
        image_url=f"https://cf.geekdo-images.com/{bgg_id}/original.jpg",
        thumbnail_url=f"https://cf.geekdo-images.com/{bgg_id}/thumb.jpg",
    )


def candidate(
    source: Source,
    values: Mapping[EnrichableField, str | None] | None = None,
    *,
    confident: bool = False,
    follows: Sequence[SequelLink] = (),
    followed_by: Sequence[SequelLink] = (),
    wikidata_id: str | None = None,
) -> EnrichmentCandidate:
    claims = {
        name: FieldClaim(value, confident=confident or value is None)
        for name, value in (values or {}).items()
    }
    return EnrichmentCandidate(
        source=source,
        claims=claims,
        follows=tuple(follows),
        followed_by=tuple(followed_by),
        wikidata_id=wikidata_id,
    )


@dataclass
class FakeSource:
    """Secondary adapter returning a canned candidate, raising, or sleeping first."""

    source: Source
    result: EnrichmentCandidate | None = None
    error: AdapterError | None = None
    delay: float = 0.0
    calls: list[IdentityHints] = field(default_factory=list["IdentityHints"])

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate:
        _ = timeout
        self.calls.append(hints)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


@dataclass
class FakeArticleFetcher:
    source: Source
    result: EnrichmentCandidate
    urls: list[str] = field(default_factory=list[str])

    async def fetch_article(
        self,
        url: str,
        hints: IdentityHints,
        *,
        timeout: float,
    ) -> EnrichmentCandidate:
        _ = hints, timeout
        self.urls.append(url)
        return self.result


@dataclass
class FakePrimarySource:
    records: dict[int, PrimaryRecord] = field(default_factory=dict[int, PrimaryRecord])
    error: AdapterError | None = None
    delay: float = 0.0
    calls: list[int] = field(default_factory=list[int])

    async def fetch_record(self, bgg_id: int, *, timeout: float) -> PrimaryRecord:
        _ = timeout
        self.calls.append(bgg_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        record = self.records.get(bgg_id)
        if record is None:
            raise NotFoundError(Source.BGG, f"thing {bgg_id} not found")
        return record


def orchestrator(
    *adapters: FakeSource,
    adapter_timeout: float = 1.0,
    deadline: float = 2.0,
    article_fetcher: FakeArticleFetcher | None = None,
) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        adapters,
        adapter_timeout=adapter_timeout,
        deadline=deadline,
        article_fetcher=article_fetcher,
    )


def feed_item(
    bgg_id: int,
    updated_at: str,
    *,
    tagline: str | None = None,
    description: str | None = None,
) -> ContentFeedItem:
    parsed = datetime.fromisoformat(updated_at)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return ContentFeedItem(
        bgg_id=bgg_id,
        updated_at=parsed,
        updated_at_raw=updated_at,
        tagline=tagline,
        description=description,
        completeness={"tagline": tagline is not None, "description": description is not None},
    )


@dataclass
class FakeContentFeed:
    pages: list[ContentFeedPage]
    requests: list[tuple[str, int]] = field(default_factory=list[tuple[str, int]])

    def fetch_page(self, *, since: str, limit: int) -> ContentFeedPage:
        self.requests.append((since, limit))
        if not self.pages:
            return ContentFeedPage(items=())
        return self.pages.pop(0)
