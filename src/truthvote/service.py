"""Feed service: transactional operations that publish change events.

Each method runs in its own session, commits, and only then publishes
the resulting :class:`~truthvote.realtime.events.ChangeEvent` so that
subscribers never see a change that was rolled back.  Rows are returned
as plain dicts (see :func:`~truthvote.realtime.events.row_of`).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from truthvote.core.errors import NotFoundError
from truthvote.memory.repository import FeedRepository
from truthvote.realtime.events import ChangeEvent, ChangeType, row_of

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from truthvote.realtime.hub import ChangeHub, Subscription

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class FeedService:
    """Posts, votes and users over a session factory and a change hub."""

    def __init__(
        self,
        db_factory: async_sessionmaker[AsyncSession],
        hub: ChangeHub,
    ) -> None:
        self._db_factory = db_factory
        self._hub = hub

    @property
    def hub(self) -> ChangeHub:
        return self._hub

    def subscribe(
        self, table: str, *, post_id: str | None = None
    ) -> AbstractAsyncContextManager[Subscription]:
        return self._hub.subscribe(table, post_id=post_id)

    # ── Users ────────────────────────────────────────────────────

    async def upsert_user(self, name: str) -> Row:
        async with self._db_factory() as session:
            repo = FeedRepository(session)
            user = await repo.upsert_user(name)
            await session.commit()
            return row_of(user)

    # ── Posts ────────────────────────────────────────────────────

    async def list_posts(self, *, limit: int | None = None) -> list[Row]:
        async with self._db_factory() as session:
            posts = await FeedRepository(session).list_posts(limit=limit)
            return [row_of(p) for p in posts]

    async def get_post(self, post_id: str) -> Row:
        async with self._db_factory() as session:
            post = await FeedRepository(session).get_post(post_id)
            if post is None:
                msg = f"Post not found: {post_id}"
                raise NotFoundError(msg)
            return row_of(post)

    async def create_post(
        self, author_name: str, content: str, image_url: str | None = None
    ) -> Row:
        """Create a post, registering the author name on first use."""
        async with self._db_factory() as session:
            repo = FeedRepository(session)
            user = await repo.upsert_user(author_name)
            post = await repo.create_post(user.name, content, image_url)
            await session.commit()
            row = row_of(post)

        logger.info("Post %s created by %s", row["id"], row["author_name"])
        self._hub.publish(ChangeEvent("posts", ChangeType.INSERT, new=row))
        return row

    async def update_post(
        self,
        post_id: str,
        editor_name: str,
        content: str,
        image_url: str | None = None,
    ) -> Row:
        async with self._db_factory() as session:
            repo = FeedRepository(session)
            existing = await repo.get_post(post_id)
            old = row_of(existing) if existing is not None else {}
            post = await repo.update_post(post_id, editor_name, content, image_url)
            await session.commit()
            row = row_of(post)

        logger.info("Post %s updated by %s", post_id, editor_name)
        self._hub.publish(ChangeEvent("posts", ChangeType.UPDATE, new=row, old=old))
        return row

    async def delete_post(self, post_id: str, editor_name: str) -> None:
        """Delete a post and, through the cascade, its votes."""
        async with self._db_factory() as session:
            repo = FeedRepository(session)
            post = await repo.get_post(post_id)
            old = row_of(post) if post is not None else {}
            votes = await repo.delete_post(post_id, editor_name)
            vote_rows = [row_of(v) for v in votes]
            await session.commit()

        logger.info(
            "Post %s deleted by %s (%d vote(s) cascaded)",
            post_id,
            editor_name,
            len(vote_rows),
        )
        for vote_row in vote_rows:
            self._hub.publish(ChangeEvent("votes", ChangeType.DELETE, old=vote_row))
        self._hub.publish(ChangeEvent("posts", ChangeType.DELETE, old=old))

    # ── Votes ────────────────────────────────────────────────────

    async def list_votes(self, post_id: str) -> list[Row]:
        async with self._db_factory() as session:
            votes = await FeedRepository(session).list_votes(post_id)
            return [row_of(v) for v in votes]

    async def cast_vote(self, post_id: str, user_name: str, vote_type: str) -> Row:
        """Record a vote.

        Raises:
            DuplicateVoteError: The user already voted on this post.
        """
        async with self._db_factory() as session:
            repo = FeedRepository(session)
            vote = await repo.cast_vote(post_id, user_name, vote_type)
            await session.commit()
            row = row_of(vote)

        logger.info("Vote %s on post %s by %s", vote_type, post_id, user_name)
        self._hub.publish(ChangeEvent("votes", ChangeType.INSERT, new=row))
        return row
