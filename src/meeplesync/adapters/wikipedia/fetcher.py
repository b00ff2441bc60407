"""English Wikipedia as the encyclopedia source."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.source_errors import classify_failures
from meeplesync.config.wikimedia import get_wikipedia_config
from meeplesync.domain.enrichment.errors import NotFoundError
from meeplesync.domain.model import Source

from .client import WikipediaClient
from .translator import SEARCH_SUFFIXES, choose_title, title_from_url, translate_page

if TYPE_CHECKING:
    from meeplesync.config.wikimedia import WikipediaConfig
    from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, IdentityHints

    from .schema import WikiPage

log = getLogger(__name__)


class WikipediaSource:
    """Finds the article for a game, or reads a known article directly."""

    def __init__(
        self,
        *,
        config: WikipediaConfig | None = None,
        client: WikipediaClient | None = None,
    ) -> None:
        self._client = client or WikipediaClient(config=config or get_wikipedia_config())

    @property
    def source(self) -> Source:
        return Source.WIKIPEDIA

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate:
        if hints.wikipedia_url:
            return await self.fetch_article(hints.wikipedia_url, hints, timeout=timeout)
        if not hints.name:
            raise NotFoundError(Source.WIKIPEDIA, "no name to search for")

        with classify_failures(Source.WIKIPEDIA):
            async with asyncio.timeout(timeout):
                title = await self._search(hints.name)
                if title is None:
                    raise NotFoundError(Source.WIKIPEDIA, f"no article for {hints.name!r}")
                page = await self._client.fetch_page(title)
        return self._translate(page, title)

    async def fetch_article(
        self,
        url: str,
        hints: IdentityHints,
        *,
        timeout: float,
    ) -> EnrichmentCandidate:
        _ = hints
        title = title_from_url(url)
        if title is None:
            raise NotFoundError(Source.WIKIPEDIA, f"not an article URL: {url}")
        with classify_failures(Source.WIKIPEDIA):
            async with asyncio.timeout(timeout):
                page = await self._client.fetch_page(title)
        return self._translate(page, title)

    async def _search(self, name: str) -> str | None:
        title = choose_title(name, await self._client.search_titles(name, limit=10))
        if title is not None:
            return title
        for suffix in SEARCH_SUFFIXES:
            titles = await self._client.search_titles(f"{name} {suffix}", limit=5)
            title = choose_title(name, titles)
            if title is not None:
                return title
        return None

    @staticmethod
    def _translate(page: WikiPage | None, title: str) -> EnrichmentCandidate:
        if page is None or not page.exists:
            raise NotFoundError(Source.WIKIPEDIA, f"article {title!r} does not exist")
        if page.is_disambiguation:
            raise NotFoundError(Source.WIKIPEDIA, f"article {title!r} is a disambiguation page")
        candidate = translate_page(page)
        log.debug("Wikipedia article %r offered %s", page.title, sorted(candidate.claims))
        return candidate


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import ArticleFetcher, SourceAdapter

    _source_check: SourceAdapter = WikipediaSource()
    _article_check: ArticleFetcher = WikipediaSource()
