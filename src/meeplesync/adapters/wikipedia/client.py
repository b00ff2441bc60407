"""English Wikipedia MediaWiki API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient
from meeplesync.adapters.source_errors import SourcePayloadError
from meeplesync.config.wikimedia import DEFAULT_WIKIPEDIA_API_URL

from .schema import QueryResponse, WikiPage, parse_opensearch

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.config.http_resilience import ResilienceConfig
    from meeplesync.config.wikimedia import WikipediaConfig

log = getLogger(__name__)


class WikipediaClient:
    def __init__(
        self,
        *,
        config: WikipediaConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._endpoint = config.resilience.base_url or DEFAULT_WIKIPEDIA_API_URL

    async def search_titles(self, query: str, *, limit: int = 5) -> list[str]:
        params = {
            "action": "opensearch",
            "search": query,
            "limit": str(limit),
            "namespace": "0",
            "format": "json",
        }
        return parse_opensearch(await self._get_json(params))

    async def fetch_page(self, title: str) -> WikiPage | None:
        """Lead-section plain text, canonical URL, lead image and external links of a page."""

        params = {
            "action": "query",
            "titles": title,
            "redirects": "1",
            "prop": "extracts|info|pageimages|extlinks|pageprops",
            "exintro": "1",
            "explaintext": "1",
            "inprop": "url",
            "piprop": "original",
            "ellimit": "100",
            "ppprop": "disambiguation",
            "format": "json",
            "formatversion": "2",
        }
        response = QueryResponse.model_validate(await self._get_json(params))
        pages = response.query.pages
        return pages[0] if pages else None

    async def _get_json(self, params: dict[str, str]) -> object:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(self._endpoint, params=params)
            response.raise_for_status()

        payload = response.json()
        if isinstance(payload, dict) and "error" in payload:
            raise SourcePayloadError(f"Wikipedia API error: {payload['error']}")
        return payload
