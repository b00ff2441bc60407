from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class YouTubeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VideoId(YouTubeModel):
    kind: str | None = None
    video_id: str | None = Field(default=None, alias="videoId")


class Snippet(YouTubeModel):
    title: str | None = None
    channel_title: str | None = Field(default=None, alias="channelTitle")


class SearchItem(YouTubeModel):
    id: VideoId
    snippet: Snippet | None = None


class SearchListResponse(YouTubeModel):
    items: list[SearchItem] = Field(default_factory=list)
