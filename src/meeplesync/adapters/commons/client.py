"""Wikimedia Commons file search client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient
from meeplesync.adapters.source_errors import SourcePayloadError
from meeplesync.config.wikimedia import DEFAULT_COMMONS_API_URL

from .schema import FilePage, ImageInfoResponse, SearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from meeplesync.config.http_resilience import ResilienceConfig
    from meeplesync.config.wikimedia import CommonsConfig

log = getLogger(__name__)

_FILE_NAMESPACE = "6"


class CommonsClient:
    def __init__(
        self,
        *,
        config: CommonsConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._endpoint = config.resilience.base_url or DEFAULT_COMMONS_API_URL

    async def search_files(self, query: str) -> list[str]:
        params = {
            "action": "query",
            "list": "search",
            "srsearch": query,
            "srnamespace": _FILE_NAMESPACE,
            "srlimit": str(self._config.search_limit * 2),
            "format": "json",
            "formatversion": "2",
        }
        response = SearchResponse.model_validate(await self._get_json(params))
        return [hit.title for hit in response.query.search]

    async def image_details(self, titles: Sequence[str]) -> list[FilePage]:
        if not titles:
            return []
        params = {
            "action": "query",
            "titles": "|".join(titles),
            "prop": "imageinfo",
            "iiprop": "url|size|mime",
            "iiurlwidth": str(self._config.thumb_width),
            "format": "json",
            "formatversion": "2",
        }
        response = ImageInfoResponse.model_validate(await self._get_json(params))
        return response.query.pages

    async def _get_json(self, params: dict[str, str]) -> object:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(self._endpoint, params=params)
            response.raise_for_status()

        payload = response.json()
        if isinstance(payload, dict) and "error" in payload:
            raise SourcePayloadError(f"Commons API error: {payload['error']}")
        return payload
