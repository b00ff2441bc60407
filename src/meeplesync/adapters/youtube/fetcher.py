"""YouTube as the how-to-play video source."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.source_errors import classify_failures
from meeplesync.config.youtube import get_youtube_config
from meeplesync.domain.enrichment.candidates import EnrichmentCandidate, FieldClaim
from meeplesync.domain.enrichment.errors import NotFoundError
from meeplesync.domain.model import EnrichableField, Source

from .client import YouTubeClient

if TYPE_CHECKING:
    from meeplesync.config.youtube import YouTubeConfig
    from meeplesync.domain.enrichment.candidates import IdentityHints

    from .schema import SearchListResponse

log = getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def first_video_url(response: SearchListResponse) -> str | None:
    for item in response.items:
        if item.id.video_id:
            return WATCH_URL.format(video_id=item.id.video_id)
    return None


class YouTubeSource:
    def __init__(
        self,
        *,
        config: YouTubeConfig | None = None,
        client: YouTubeClient | None = None,
    ) -> None:
        self._config = config or get_youtube_config()
        self._client = client or YouTubeClient(config=self._config)

    @property
    def source(self) -> Source:
        return Source.YOUTUBE

    async def fetch(self, hints: IdentityHints, *, timeout: float) -> EnrichmentCandidate:
        if not hints.name:
            raise NotFoundError(Source.YOUTUBE, "no name to search for")
        query = f"{hints.name} {self._config.query_suffix}".strip()

        with classify_failures(Source.YOUTUBE):
            async with asyncio.timeout(timeout):
                response = await self._client.search_videos(query)
        url = first_video_url(response)
        if url is None:
            raise NotFoundError(Source.YOUTUBE, f"no videos for {query!r}")
        log.debug("YouTube picked %s for %r", url, hints.name)
        return EnrichmentCandidate(
            source=Source.YOUTUBE,
            claims={EnrichableField.VIDEO_URL: FieldClaim(url)},
        )


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import SourceAdapter

    _source_check: SourceAdapter = YouTubeSource()
