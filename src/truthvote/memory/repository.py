"""Feed repository: users, posts, votes.

All mutating methods add objects to the session and flush, but do NOT
commit.  The caller controls transaction boundaries via
``session.commit()``.  When the database rejects a write the session is
rolled back before the error is translated, so the caller must not rely
on earlier uncommitted work surviving a failed call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from truthvote.core.errors import (
    ConstraintViolationError,
    DuplicateVoteError,
    NotAuthorError,
    NotFoundError,
)
from truthvote.memory.models import Post, User, Vote, _utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _clean_image_url(image_url: str | None) -> str | None:
    if image_url is None:
        return None
    return image_url.strip() or None


class FeedRepository:
    """Async repository over the users, posts and votes tables."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── User ─────────────────────────────────────────────────────

    async def upsert_user(self, name: str) -> User:
        """Return the user called *name*, creating it on first use."""
        name = name.strip()
        if not name:
            msg = "User name must not be empty"
            raise ValueError(msg)

        existing = await self.get_user(name)
        if existing is not None:
            return existing

        user = User(name=name)
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError:
            # Lost a race with a concurrent first use of the same name.
            await self._session.rollback()
            existing = await self.get_user(name)
            if existing is None:
                raise
            return existing
        return user

    async def get_user(self, name: str) -> User | None:
        stmt = select(User).where(User.name == name)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # ── Post ─────────────────────────────────────────────────────

    async def create_post(
        self,
        author_name: str,
        content: str,
        image_url: str | None = None,
    ) -> Post:
        """Create a post.

        Raises:
            ValueError: If content is blank.
            ConstraintViolationError: If the database rejects the row
                (e.g. content longer than 500 characters).
        """
        content = content.strip()
        if not content:
            msg = "Post content must not be empty"
            raise ValueError(msg)

        post = Post(
            author_name=author_name,
            content=content,
            image_url=_clean_image_url(image_url),
        )
        self._session.add(post)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            msg = f"Post rejected by storage: {e.orig}"
            raise ConstraintViolationError(msg) from e
        return post

    async def get_post(self, post_id: str) -> Post | None:
        return await self._session.get(Post, post_id)

    async def list_posts(self, *, limit: int | None = None) -> list[Post]:
        """List posts ordered by most recent first."""
        stmt = select(Post).order_by(Post.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _get_own_post(self, post_id: str, editor_name: str) -> Post:
        post = await self.get_post(post_id)
        if post is None:
            msg = f"Post not found: {post_id}"
            raise NotFoundError(msg)
        if post.author_name != editor_name:
            msg = f"{editor_name} is not the author of post {post_id}"
            raise NotAuthorError(msg)
        return post

    async def update_post(
        self,
        post_id: str,
        editor_name: str,
        content: str,
        image_url: str | None = None,
    ) -> Post:
        """Replace a post's content and image. Author only."""
        content = content.strip()
        if not content:
            msg = "Post content must not be empty"
            raise ValueError(msg)

        post = await self._get_own_post(post_id, editor_name)
        post.content = content
        post.image_url = _clean_image_url(image_url)
        post.updated_at = _utcnow()
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            msg = f"Post update rejected by storage: {e.orig}"
            raise ConstraintViolationError(msg) from e
        return post

    async def delete_post(self, post_id: str, editor_name: str) -> list[Vote]:
        """Delete a post. Author only.

        Its votes are removed by the ``ON DELETE CASCADE`` foreign key.

        Returns:
            The votes that were attached to the post, as loaded just
            before deletion.
        """
        post = await self._get_own_post(post_id, editor_name)
        votes = await self.list_votes(post_id)
        await self._session.delete(post)
        await self._session.flush()
        return votes

    # ── Vote ─────────────────────────────────────────────────────

    async def list_votes(self, post_id: str) -> list[Vote]:
        stmt = select(Vote).where(Vote.post_id == post_id).order_by(Vote.created_at)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_vote(self, post_id: str, user_name: str) -> Vote | None:
        stmt = select(Vote).where(Vote.post_id == post_id, Vote.user_name == user_name)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def cast_vote(self, post_id: str, user_name: str, vote_type: str) -> Vote:
        """Insert a vote. Votes are never updated or retracted.

        Raises:
            DuplicateVoteError: *user_name* already voted on this post.
            NotFoundError: The post does not exist.
            ConstraintViolationError: Any other rejected insert
                (e.g. an unknown vote_type).
        """
        vote = Vote(post_id=post_id, user_name=user_name, vote_type=vote_type)
        self._session.add(vote)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            if await self.get_vote(post_id, user_name) is not None:
                raise DuplicateVoteError(post_id, user_name) from e
            if await self.get_post(post_id) is None:
                msg = f"Post not found: {post_id}"
                raise NotFoundError(msg) from e
            msg = f"Vote rejected by storage: {e.orig}"
            raise ConstraintViolationError(msg) from e
        return vote
