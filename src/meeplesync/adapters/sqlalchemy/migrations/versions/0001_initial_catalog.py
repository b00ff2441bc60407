"""Initial catalog schema

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_catalog"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PIPELINE_STATES = (
    "PENDING",
    "IMPORTING",
    "ENRICHING",
    "RULEBOOK_PENDING",
    "RULEBOOK_READY",
    "PENDING_REVIEW",
    "PUBLISHED",
    "ARCHIVED",
    "ERROR",
)


def upgrade() -> None:
    op.create_table(
        "catalog_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("bgg_id", sa.Integer(), nullable=False),
        sa.Column("wikidata_id", sa.String(length=32), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("year_published", sa.Integer(), nullable=True),
        sa.Column("designers", sa.JSON(), nullable=False),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("mechanics", sa.JSON(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("thumbnail_url", sa.String(), nullable=True),
        sa.Column("tagline", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image_url", sa.String(), nullable=True),
        sa.Column("hero_image_url", sa.String(), nullable=True),
        sa.Column("wikipedia_url", sa.String(), nullable=True),
        sa.Column("official_url", sa.String(), nullable=True),
        sa.Column("rulebook_url", sa.String(), nullable=True),
        sa.Column("video_url", sa.String(), nullable=True),
        sa.Column("category_slugs", sa.JSON(), nullable=False),
        sa.Column("theme_slugs", sa.JSON(), nullable=False),
        sa.Column(
            "pipeline_state",
            sa.Enum(*PIPELINE_STATES, name="pipelinestate", native_enum=False),
            nullable=False,
        ),
        sa.Column("pipeline_error", sa.Text(), nullable=True),
        sa.Column("last_processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("content_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("content_completeness", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_catalog_entry")),
        sa.UniqueConstraint("bgg_id", name=op.f("uq_catalog_entry_catalog_entry_bgg_id")),
    )
    with op.batch_alter_table("catalog_entry", schema=None) as batch_op:
        batch_op.create_index(
            op.f("ix_catalog_entry_wikidata_id"), ["wikidata_id"], unique=False
        )
        batch_op.create_index("ix_catalog_entry_pipeline_state", ["pipeline_state"], unique=False)

    op.create_table(
        "sequel_relation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject_bgg_id", sa.Integer(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum("FOLLOWS", "PRECEDES", name="relationkind", native_enum=False),
            nullable=False,
        ),
        sa.Column("object_bgg_id", sa.Integer(), nullable=False),
        sa.Column("object_label", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sequel_relation")),
        sa.UniqueConstraint(
            "subject_bgg_id", "kind", "object_bgg_id", name="uq_sequel_relation_edge"
        ),
    )
    with op.batch_alter_table("sequel_relation", schema=None) as batch_op:
        batch_op.create_index("ix_sequel_relation_subject", ["subject_bgg_id"], unique=False)

    op.create_table(
        "series_membership",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Uuid(), nullable=False),
        sa.Column("series_id", sa.String(length=32), nullable=False),
        sa.Column("series_label", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_series_membership")),
        sa.UniqueConstraint(
            "entry_id", "series_id", name="uq_series_membership_entry_series"
        ),
    )

    op.create_table(
        "import_queue",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("bgg_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column(
            "origin",
            sa.Enum(
                "MANUAL",
                "BGG_TOP",
                "AWARD_WINNER",
                "RELATION",
                name="queueorigin",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "IMPORTING",
                "COMPLETED",
                "FAILED",
                name="queuestatus",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_import_queue")),
        sa.UniqueConstraint("bgg_id", name=op.f("uq_import_queue_import_queue_bgg_id")),
    )
    with op.batch_alter_table("import_queue", schema=None) as batch_op:
        batch_op.create_index(
            "ix_import_queue_status_priority", ["status", "priority"], unique=False
        )

    op.create_table(
        "sync_cursor",
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("cursor_value", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("run_metadata", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_sync_cursor")),
    )


def downgrade() -> None:
    op.drop_table("sync_cursor")
    with op.batch_alter_table("import_queue", schema=None) as batch_op:
        batch_op.drop_index("ix_import_queue_status_priority")
    op.drop_table("import_queue")
    op.drop_table("series_membership")
    with op.batch_alter_table("sequel_relation", schema=None) as batch_op:
        batch_op.drop_index("ix_sequel_relation_subject")
    op.drop_table("sequel_relation")
    with op.batch_alter_table("catalog_entry", schema=None) as batch_op:
        batch_op.drop_index("ix_catalog_entry_pipeline_state")
        batch_op.drop_index(op.f("ix_catalog_entry_wikidata_id"))
    op.drop_table("catalog_entry")
