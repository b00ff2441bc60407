from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FeedModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FeedContent(FeedModel):
    tagline: str | None = None
    description: str | None = None


class FeedItem(FeedModel):
    bgg_id: int = Field(alias="bggId")
    updated_at: str = Field(alias="updatedAt")
    content: FeedContent = Field(default_factory=FeedContent)
    completeness: dict[str, Any] | None = None


class FeedMeta(FeedModel):
    has_more: bool = Field(default=False, alias="hasMore")


class FeedPage(FeedModel):
    items: list[FeedItem] = Field(default_factory=list)
    meta: FeedMeta = Field(default_factory=FeedMeta)
