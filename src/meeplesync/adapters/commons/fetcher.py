"""Wikimedia Commons as the image source."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.source_errors import classify_failures
from meeplesync.config.wikimedia import get_commons_config
from meeplesync.domain.enrichment.errors import NotFoundError
from meeplesync.domain.model import Source

from .client import CommonsClient
from .translator import images_from_pages, is_excluded, search_query, translate_images

if TYPE_CHECKING:
    from meeplesync.config.wikimedia import CommonsConfig
    from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, IdentityHints

log = getLogger(__name__)


class CommonsSource:
    def __init__(
        self,
        *,
        config: CommonsConfig | None = None,
        client: CommonsClient | None = None,
    ) -> None:
        self._config = config or get_commons_config()
        self._client = client or CommonsClient(config=self._config)

    @property
    def source(self) -> Source:
        return Source.COMMONS

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate:
        if not hints.name:
            raise NotFoundError(Source.COMMONS, "no name to search for")
        name = hints.name

        with classify_failures(Source.COMMONS):
            async with asyncio.timeout(timeout):
                titles = await self._client.search_files(search_query(name))
                kept = [title for title in titles if not is_excluded(title)]
                pages = await self._client.image_details(
                    kept[: self._config.search_limit + 2]
                )
        images = images_from_pages(pages)
        if not images:
            raise NotFoundError(Source.COMMONS, f"no usable files for {name!r}")
        log.debug("Commons offered %s file(s) for %r", len(images), name)
        return translate_images(images, name)


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import SourceAdapter

    _source_check: SourceAdapter = CommonsSource()
