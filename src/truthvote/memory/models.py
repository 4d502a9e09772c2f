"""SQLAlchemy models for users, posts and votes.

Storage-level rules live here as constraints so that every writer is
held to them, not only this application:

* post content is at most 500 characters,
* a vote is ``'true'`` or ``'fake'``,
* one vote per ``(post_id, user_name)``,
* deleting a post deletes its votes.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

MAX_CONTENT_LENGTH = 500
VOTE_TYPES = ("true", "fake")


def _uuid() -> str:
    """Generate a UUID4 string for primary keys."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    """Current UTC time for timestamps."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all truthvote models."""


class User(Base):
    """A display name. There is no password; the row is created on first use."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)


class Post(Base):
    """A claim posted to the feed."""

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            f"length(content) <= {MAX_CONTENT_LENGTH}",
            name="ck_posts_content_length",
        ),
        Index("ix_posts_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    # Weak reference to users.name; not a foreign key.
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow
    )

    votes: Mapped[list[Vote]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Vote(Base):
    """A single user's true/fake vote on a post. Never updated."""

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_name", name="uq_votes_post_user"),
        CheckConstraint(
            "vote_type IN ('true', 'fake')",
            name="ck_votes_vote_type",
        ),
        Index("ix_votes_user_name", "user_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    post_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), index=True
    )
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    vote_type: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    post: Mapped[Post] = relationship(back_populates="votes")
