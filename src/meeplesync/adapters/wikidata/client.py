"""Wikidata query service client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient
from meeplesync.adapters.source_errors import SourcePayloadError
from meeplesync.config.wikimedia import DEFAULT_WIKIDATA_SPARQL_URL

from .schema import SparqlResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.config.http_resilience import ResilienceConfig
    from meeplesync.config.wikimedia import WikidataConfig

log = getLogger(__name__)


class WikidataClient:
    """Runs SPARQL queries and validates the JSON result document."""

    def __init__(
        self,
        *,
        config: WikidataConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._endpoint = config.resilience.base_url or DEFAULT_WIKIDATA_SPARQL_URL

    async def query(self, sparql: str) -> SparqlResponse:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(self._endpoint, params={"query": sparql, "format": "json"})
            response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict) or "results" not in payload:
            raise SourcePayloadError("Unexpected Wikidata SPARQL response payload")
        return SparqlResponse.model_validate(payload)
