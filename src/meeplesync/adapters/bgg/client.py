"""BoardGameGeek XML API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient

from .schema import BggItem, parse_thing_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.config.bgg import BggConfig
    from meeplesync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class BggClient:
    """Low-level HTTP client for the BGG ``thing`` endpoint."""

    def __init__(
        self,
        *,
        config: BggConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_thing(self, bgg_id: int) -> list[BggItem]:
        async with self._client_factory(self._resilience) as client:
            response = await client.get("thing", params={"id": str(bgg_id), "stats": "1"})
            response.raise_for_status()
        items = parse_thing_response(response.content)
        log.debug("BGG returned %s item(s) for %s", len(items), bgg_id)
        return items
