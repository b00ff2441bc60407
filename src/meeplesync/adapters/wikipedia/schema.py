"""MediaWiki action API response models (``formatversion=2``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from meeplesync.adapters.source_errors import SourcePayloadError


class MediaWikiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PageImage(MediaWikiModel):
    source: str
    width: int | None = None
    height: int | None = None


class ExternalLink(MediaWikiModel):
    url: str


class WikiPage(MediaWikiModel):
    title: str
    pageid: int | None = None
    missing: bool = False
    invalid: bool = False
    extract: str | None = None
    fullurl: str | None = None
    original: PageImage | None = None
    extlinks: list[ExternalLink] = Field(default_factory=list)
    pageprops: dict[str, Any] = Field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return not (self.missing or self.invalid) and self.pageid is not None

    @property
    def is_disambiguation(self) -> bool:
        return "disambiguation" in self.pageprops


class QueryBody(MediaWikiModel):
    pages: list[WikiPage] = Field(default_factory=list)


class QueryResponse(MediaWikiModel):
    query: QueryBody = Field(default_factory=QueryBody)


def parse_opensearch(payload: object) -> list[str]:
    """Titles from an ``action=opensearch`` answer: ``[query, [titles], [descs], [urls]]``."""

    if not isinstance(payload, list) or len(payload) < 2 or not isinstance(payload[1], list):
        raise SourcePayloadError("Unexpected Wikipedia opensearch payload")
    return [title for title in payload[1] if isinstance(title, str)]
