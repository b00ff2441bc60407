"""Wikidata as the knowledge-graph source."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.source_errors import classify_failures
from meeplesync.config.wikimedia import get_wikidata_config
from meeplesync.domain.enrichment.errors import NotFoundError
from meeplesync.domain.model import Source

from .client import WikidataClient
from .queries import game_by_bgg_id, game_by_label
from .translator import reject_by_year, select_game, translate_rows

if TYPE_CHECKING:
    from meeplesync.config.wikimedia import WikidataConfig
    from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, IdentityHints

log = getLogger(__name__)


class WikidataSource:
    """Looks an item up by BGG ID, falling back to an exact English label match."""

    def __init__(
        self,
        *,
        config: WikidataConfig | None = None,
        client: WikidataClient | None = None,
    ) -> None:
        self._client = client or WikidataClient(config=config or get_wikidata_config())

    @property
    def source(self) -> Source:
        return Source.WIKIDATA

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate:
        with classify_failures(Source.WIKIDATA):
            async with asyncio.timeout(timeout):
                rows = await self._lookup(hints)
        if not rows:
            raise NotFoundError(Source.WIKIDATA, f"no item for {_describe(hints)}")

        candidate = translate_rows(rows, bgg_id=hints.bgg_id)
        if candidate.dropped_fields:
            log.warning(
                "Dropped malformed Wikidata fields for %s: %s",
                _describe(hints),
                ", ".join(candidate.dropped_fields),
            )
        return candidate

    async def _lookup(self, hints: IdentityHints) -> list[dict[str, str]]:
        if hints.bgg_id is not None:
            response = await self._client.query(game_by_bgg_id(hints.bgg_id))
            rows = select_game(response.rows(), hints)
            if rows:
                return rows
        if not hints.name:
            return []

        response = await self._client.query(game_by_label(hints.name))
        rows = select_game(response.rows(), hints)
        if reject_by_year(rows, hints.year):
            log.info("Wikidata label match for %r rejected on year", hints.name)
            return []
        return rows


def _describe(hints: IdentityHints) -> str:
    return f"bgg_id={hints.bgg_id}" if hints.bgg_id is not None else repr(hints.name)


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import SourceAdapter

    _source_check: SourceAdapter = WikidataSource()
