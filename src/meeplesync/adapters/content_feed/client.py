"""HTTP client for the curated content feed."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from meeplesync.adapters.http_resilience import ResilientClient
from meeplesync.config.content_feed import get_content_feed_config
from meeplesync.domain.ports.sources import ContentFeedItem, ContentFeedPage

from .schema import FeedItem, FeedPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from meeplesync.config.content_feed import ContentFeedConfig
    from meeplesync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` and naive values are read as UTC."""

    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_feed_item(item: FeedItem) -> ContentFeedItem | None:
    try:
        updated_at = parse_timestamp(item.updated_at)
    except ValueError:
        log.warning("Dropping feed item %s with bad timestamp %r", item.bgg_id, item.updated_at)
        return None
    return ContentFeedItem(
        bgg_id=item.bgg_id,
        updated_at=updated_at,
        updated_at_raw=item.updated_at,
        tagline=item.content.tagline,
        description=item.content.description,
        completeness=item.completeness,
    )


class HttpContentFeed:
    def __init__(
        self,
        *,
        config: ContentFeedConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or get_content_feed_config()
        self._resilience = self._config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_page(self, *, since: str, limit: int) -> ContentFeedPage:
        return asyncio.run(self.fetch_page_async(since=since, limit=limit))

    async def fetch_page_async(self, *, since: str, limit: int) -> ContentFeedPage:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(
                "content/feed", params={"since": since, "limit": str(limit)}
            )
            response.raise_for_status()

        page = FeedPage.model_validate(response.json())
        items = tuple(item for raw in page.items if (item := to_feed_item(raw)) is not None)
        log.debug("Content feed returned %s item(s) since %s", len(items), since)
        return ContentFeedPage(items=items, has_more=page.meta.has_more)


if TYPE_CHECKING:
    from meeplesync.domain.ports.sources import ContentFeed

    _feed_check: ContentFeed = HttpContentFeed()
