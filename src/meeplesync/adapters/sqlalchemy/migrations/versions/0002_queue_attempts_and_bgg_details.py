"""Queue attempts and stored BGG details

Revision ID: 0002_queue_attempts_and_bgg_details
Revises: 0001_initial_catalog
Create Date: 2026-10-19 15:30:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002_queue_attempts_and_bgg_details"
down_revision: str | None = "0001_initial_catalog"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    with op.batch_alter_table("import_queue", schema=None) as batch_op:
        batch_op.add_column(
            sa.Column("attempts", sa.Integer(), nullable=False, server_default="0")
        )

    with op.batch_alter_table("catalog_entry", schema=None) as batch_op:
        batch_op.add_column(
            sa.Column(
                "kind", sa.String(length=32), nullable=False, server_default="boardgame"
            )
        )
        batch_op.add_column(
            sa.Column("alternate_names", sa.JSON(), nullable=False, server_default="[]")
        )
        batch_op.add_column(
            sa.Column("publishers", sa.JSON(), nullable=False, server_default="[]")
        )
        batch_op.add_column(
            sa.Column("series_families", sa.JSON(), nullable=False, server_default="[]")
        )


def downgrade() -> None:
    with op.batch_alter_table("catalog_entry", schema=None) as batch_op:
        batch_op.drop_column("series_families")
        batch_op.drop_column("publishers")
        batch_op.drop_column("alternate_names")
        batch_op.drop_column("kind")

    with op.batch_alter_table("import_queue", schema=None) as batch_op:
        batch_op.drop_column("attempts")
