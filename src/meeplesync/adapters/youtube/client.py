"""YouTube Data API v3 search client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient

from .schema import SearchListResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.config.http_resilience import ResilienceConfig
    from meeplesync.config.youtube import YouTubeConfig

log = getLogger(__name__)


class YouTubeClient:
    def __init__(
        self,
        *,
        config: YouTubeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def search_videos(self, query: str, *, limit: int = 5) -> SearchListResponse:
        params = {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": str(limit),
            "order": "relevance",
            "key": self._config.api_key,
        }
        async with self._client_factory(self._resilience) as client:
            response = await client.get("search", params=params)
            response.raise_for_status()

        return SearchListResponse.model_validate(response.json())
