"""Commons search and imageinfo response models (``formatversion=2``)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommonsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SearchHit(CommonsModel):
    title: str


class SearchBody(CommonsModel):
    search: list[SearchHit] = Field(default_factory=list)


class SearchResponse(CommonsModel):
    query: SearchBody = Field(default_factory=SearchBody)


class ImageInfo(CommonsModel):
    url: str
    thumb_url: str | None = Field(default=None, alias="thumburl")
    width: int = 0
    height: int = 0
    mime: str | None = None


class FilePage(CommonsModel):
    title: str
    missing: bool = False
    imageinfo: list[ImageInfo] = Field(default_factory=list)


class ImageInfoBody(CommonsModel):
    pages: list[FilePage] = Field(default_factory=list)


class ImageInfoResponse(CommonsModel):
    query: ImageInfoBody = Field(default_factory=ImageInfoBody)
