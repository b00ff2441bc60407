"""BoardGameGeek as the primary catalog source."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.source_errors import SourcePayloadError, classify_failures
from meeplesync.config.bgg import get_bgg_config
from meeplesync.domain.enrichment.errors import NotFoundError
from meeplesync.domain.model import Source

from .client import BggClient
from .translator import translate_item

if TYPE_CHECKING:
    from meeplesync.config.bgg import BggConfig
    from meeplesync.domain.enrichment.candidates import PrimaryRecord

log = getLogger(__name__)


class BggPrimarySource:
    def __init__(
        self,
        *,
        config: BggConfig | None = None,
        client: BggClient | None = None,
    ) -> None:
        self._client = client or BggClient(config=config or get_bgg_config())

    @property
    def source(self) -> Source:
        return Source.BGG

    async def fetch_record(self, bgg_id: int, *, timeout: float) -> PrimaryRecord:
        with classify_failures(Source.BGG):
            async with asyncio.timeout(timeout):
                items = await self._client.fetch_thing(bgg_id)
            if not items:
                raise NotFoundError(Source.BGG, f"no item with id {bgg_id}")
            try:
                record = translate_item(items[0])
            except ValueError as exc:
                raise SourcePayloadError(str(exc)) from exc
        log.info("Fetched %s (%s) from BGG", record.name, bgg_id)
        return record


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import PrimaryCatalogSource

    _source_check: PrimaryCatalogSource = BggPrimarySource()
