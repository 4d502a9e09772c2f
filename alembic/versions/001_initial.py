"""Initial schema -- users, posts, votes.

Revision ID: 001
Revises:
Create Date: 2025-09-28
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("author_name", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "length(content) <= 500", name="ck_posts_content_length"
        ),
    )
    op.create_index("ix_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "votes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "post_id",
            sa.String(36),
            sa.ForeignKey("posts.id", name="fk_votes_post_id"),
            nullable=False,
        ),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("vote_type", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("post_id", "user_name", name="uq_votes_post_user"),
        sa.CheckConstraint(
            "vote_type IN ('true', 'fake')", name="ck_votes_vote_type"
        ),
    )
    op.create_index("ix_votes_post_id", "votes", ["post_id"])
    op.create_index("ix_votes_user_name", "votes", ["user_name"])


def downgrade() -> None:
    op.drop_table("votes")
    op.drop_table("posts")
    op.drop_table("users")
