"""Cascade vote deletion when a post is deleted.

Revision ID: 002
Revises: 001
Create Date: 2025-09-28
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: str = "001"
branch_labels: tuple[str, ...] | None = None
depends_on: str | None = None


def _votes(ondelete: str | None) -> sa.Table:
    """The votes table as it stands before the change.

    Batch mode copies from this definition instead of reflecting, so the
    CHECK constraint and indexes survive the SQLite table rebuild.
    """
    metadata = sa.MetaData()
    sa.Table("posts", metadata, sa.Column("id", sa.String(36), primary_key=True))
    return sa.Table(
        "votes",
        metadata,
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "post_id",
            sa.String(36),
            sa.ForeignKey("posts.id", name="fk_votes_post_id", ondelete=ondelete),
            nullable=False,
        ),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("vote_type", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("post_id", "user_name", name="uq_votes_post_user"),
        sa.CheckConstraint("vote_type IN ('true', 'fake')", name="ck_votes_vote_type"),
        sa.Index("ix_votes_post_id", "post_id"),
        sa.Index("ix_votes_user_name", "user_name"),
    )


def upgrade() -> None:
    with op.batch_alter_table("votes", copy_from=_votes(None)) as batch:
        batch.drop_constraint("fk_votes_post_id", type_="foreignkey")
        batch.create_foreign_key(
            "fk_votes_post_id", "posts", ["post_id"], ["id"], ondelete="CASCADE"
        )


def downgrade() -> None:
    with op.batch_alter_table("votes", copy_from=_votes("CASCADE")) as batch:
        batch.drop_constraint("fk_votes_post_id", type_="foreignkey")
        batch.create_foreign_key("fk_votes_post_id", "posts", ["post_id"], ["id"])
