"""The catalog entry aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from meeplesync.domain.model.enums import EnrichableField, PipelineState


EXPANSION_KIND = "boardgameexpansion"


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CatalogEntry:
    """One board game in the catalog.

    Identity fields come from the primary catalog; the enrichable fields are written only
    through the coordinator's apply step. ``pipeline_state`` and ``pipeline_error`` are
    persisted by the state machine's conditional update and are read-only elsewhere.
    """

    id: UUID = field(default_factory=new_id)
    bgg_id: int
    wikidata_id: str | None = None

    name: str | None = None
    kind: str = "boardgame"
    alternate_names: list[str] = field(default_factory=list[str])
    year_published: int | None = None
    designers: list[str] = field(default_factory=list[str])
    publishers: list[str] = field(default_factory=list[str])
    categories: list[str] = field(default_factory=list[str])
    mechanics: list[str] = field(default_factory=list[str])
    series_families: list[str] = field(default_factory=list[str])
    image_url: str | None = None
    thumbnail_url: str | None = None

    tagline: str | None = None
    description: str | None = None
    cover_image_url: str | None = None
    hero_image_url: str | None = None
    wikipedia_url: str | None = None
    official_url: str | None = None
    rulebook_url: str | None = None
    video_url: str | None = None

    category_slugs: list[str] = field(default_factory=list[str])
    theme_slugs: list[str] = field(default_factory=list[str])

    pipeline_state: PipelineState = PipelineState.PENDING
    pipeline_error: str | None = None
    last_processed_at: datetime | None = None

    content_updated_at: datetime | None = None
    content_completeness: dict[str, Any] | None = None

    created_at: datetime = field(default_factory=utcnow)

    def get_field(self, name: EnrichableField) -> str | None:
        return getattr(self, name.value)

    def set_field(self, name: EnrichableField, value: str | None) -> None:
        setattr(self, name.value, value)

    def has_enrichment(self) -> bool:
        """Whether any secondary field already holds a value."""

        return any(self.get_field(name) is not None for name in EnrichableField)

    @property
    def is_expansion(self) -> bool:
        return self.kind == EXPANSION_KIND

    @property
    def has_rulebook(self) -> bool:
        return self.rulebook_url is not None
