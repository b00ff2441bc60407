"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    BGG = "bgg"
    WIKIDATA = "wikidata"
    WIKIPEDIA = "wikipedia"
    COMMONS = "commons"
    YOUTUBE = "youtube"


PRIMARY_SOURCE = Source.BGG
SECONDARY_SOURCES: tuple[Source, ...] = (
    Source.WIKIDATA,
    Source.WIKIPEDIA,
    Source.COMMONS,
    Source.YOUTUBE,
)


class PipelineState(StrEnum):
    PENDING = "pending"
    IMPORTING = "importing"
    ENRICHING = "enriching"
    RULEBOOK_PENDING = "rulebook_pending"
    RULEBOOK_READY = "rulebook_ready"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    ERROR = "error"


class Actor(StrEnum):
    """Who asks for a state transition."""

    PIPELINE = "pipeline"
    DOCUMENTS = "documents"
    REVIEWER = "reviewer"


class EnrichableField(StrEnum):
    """Secondary fields filled by enrichment. Order here is the canonical merge output order."""

    TAGLINE = "tagline"
    DESCRIPTION = "description"
    COVER_IMAGE_URL = "cover_image_url"
    HERO_IMAGE_URL = "hero_image_url"
    WIKIPEDIA_URL = "wikipedia_url"
    OFFICIAL_URL = "official_url"
    RULEBOOK_URL = "rulebook_url"
    VIDEO_URL = "video_url"


class RelationKind(StrEnum):
    FOLLOWS = "follows"
    PRECEDES = "precedes"


class QueueStatus(StrEnum):
    PENDING = "pending"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"


class QueueOrigin(StrEnum):
    MANUAL = "manual"
    BGG_TOP = "bgg_top"
    AWARD_WINNER = "award_winner"
    RELATION = "relation"
