"""Post view-model: vote tally with one optimistic in-flight vote.

The tally combines confirmed votes (initial load plus realtime events)
with the current user's *effective* vote:

    effective = optimistic if a vote is pending else confirmed
    true  = #true  votes by other users + (effective == "true")
    fake  = #fake  votes by other users + (effective == "fake")

The user's own rows are excluded from the base counts, so the moment
where both the optimistic marker and the confirming INSERT event are
present still counts the user once.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from truthvote.core.errors import DuplicateVoteError, NotAuthorError, TruthVoteError
from truthvote.memory.models import VOTE_TYPES
from truthvote.realtime.events import ChangeType

if TYPE_CHECKING:
    from types import TracebackType

    from truthvote.realtime.events import ChangeEvent
    from truthvote.views.backend import Backend

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class VoteError(TruthVoteError):
    """A vote could not be submitted; shown to the user."""


class VoteBlockedError(VoteError):
    """The user already has a confirmed or pending vote on this post."""


@dataclass(frozen=True, slots=True)
class VoteTally:
    """Displayed vote counts for one post."""

    true: int
    fake: int

    @property
    def total(self) -> int:
        return self.true + self.fake


class VoteState:
    """Confirmed votes for one post plus the current user's pending vote."""

    def __init__(self, post_id: str, current_user: str) -> None:
        self.post_id = post_id
        self.current_user = current_user
        self.votes: list[Row] = []
        self.user_vote: str | None = None
        self.optimistic_vote: str | None = None
        self.in_flight = False

    def load(self, rows: list[Row]) -> None:
        """Replace the vote set with a fresh read for this post."""
        self.votes = list(rows)
        mine = next(
            (v for v in self.votes if v["user_name"] == self.current_user), None
        )
        self.user_vote = mine["vote_type"] if mine is not None else None
        if self.optimistic_vote is not None and self.optimistic_vote == self.user_vote:
            self.optimistic_vote = None

    def apply(self, event: ChangeEvent) -> None:
        """Reconcile one votes-table event for this post."""
        if event.type is ChangeType.INSERT:
            vote = event.new
            if vote.get("post_id") != self.post_id:
                return
            if not any(v["id"] == vote["id"] for v in self.votes):
                self.votes.append(vote)
            if vote["user_name"] == self.current_user:
                self.user_vote = vote["vote_type"]
                self.optimistic_vote = None
        elif event.type is ChangeType.DELETE:
            vote = event.old
            self.votes = [v for v in self.votes if v["id"] != vote.get("id")]
            if vote.get("user_name") == self.current_user:
                self.user_vote = None
                self.optimistic_vote = None

    @property
    def effective_vote(self) -> str | None:
        return self.optimistic_vote or self.user_vote

    @property
    def pending(self) -> bool:
        return self.optimistic_vote is not None

    @property
    def can_vote(self) -> bool:
        return (
            not self.in_flight
            and self.user_vote is None
            and self.optimistic_vote is None
        )

    def begin_vote(self, vote_type: str) -> None:
        """Set the optimistic marker before the insert is sent."""
        if vote_type not in VOTE_TYPES:
            msg = f"vote_type must be one of {VOTE_TYPES}, got {vote_type!r}"
            raise ValueError(msg)
        if not self.can_vote:
            msg = f"{self.current_user} already voted on post {self.post_id}"
            raise VoteBlockedError(msg)
        self.optimistic_vote = vote_type
        self.in_flight = True

    def end_vote(self, *, failed: bool) -> None:
        """Finish the request; on failure drop the optimistic marker."""
        self.in_flight = False
        if failed:
            self.optimistic_vote = None

    def tally(self) -> VoteTally:
        others = [v for v in self.votes if v["user_name"] != self.current_user]
        true = sum(1 for v in others if v["vote_type"] == "true")
        fake = sum(1 for v in others if v["vote_type"] == "fake")
        effective = self.effective_vote
        if effective == "true":
            true += 1
        elif effective == "fake":
            fake += 1
        return VoteTally(true=true, fake=fake)


class PostView:
    """One post as seen by *current_user*, live for an ``async with`` block.

    On enter the view subscribes to the post's vote events and loads its
    votes; on exit the subscription is released.
    """

    def __init__(self, backend: Backend, post: Row, current_user: str) -> None:
        self._backend = backend
        self.post = dict(post)
        self.current_user = current_user
        self.votes = VoteState(post["id"], current_user)
        self._stack: AsyncExitStack | None = None
        self._task: asyncio.Task[None] | None = None
        self._changed = asyncio.Event()

    @property
    def post_id(self) -> str:
        return self.post["id"]

    @property
    def is_author(self) -> bool:
        return self.post["author_name"] == self.current_user

    async def __aenter__(self) -> PostView:
        stack = AsyncExitStack()
        try:
            sub = await stack.enter_async_context(
                self._backend.subscribe("votes", post_id=self.post_id)
            )
            await self.refresh()
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        self._task = asyncio.create_task(self._pump(sub))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._stack is not None:
            await self._stack.aclose()
            self._stack = None

    async def _pump(self, sub: Any) -> None:
        async for event in sub:
            self.votes.apply(event)
            self._changed.set()

    async def wait_for_change(self) -> None:
        """Block until at least one vote event has been applied."""
        await self._changed.wait()
        self._changed.clear()

    async def refresh(self) -> None:
        """Reload this post's votes from the backend."""
        self.votes.load(await self._backend.list_votes(self.post_id))

    def tally(self) -> VoteTally:
        return self.votes.tally()

    async def vote(self, vote_type: str) -> bool:
        """Submit a vote.

        Returns:
            True if the insert was accepted (confirmation arrives as an
            event), False if the store already had a vote from this user.

        Raises:
            VoteBlockedError: A confirmed or pending vote already exists.
            VoteError: The insert failed for any other reason.
        """
        self.votes.begin_vote(vote_type)
        try:
            await self._backend.cast_vote(self.post_id, self.current_user, vote_type)
        except DuplicateVoteError:
            logger.info(
                "Duplicate vote by %s on post %s ignored",
                self.current_user,
                self.post_id,
            )
            self.votes.end_vote(failed=True)
            return False
        except Exception as e:
            logger.exception("Failed to submit vote on post %s", self.post_id)
            self.votes.end_vote(failed=True)
            msg = "Failed to submit vote. Please try again."
            raise VoteError(msg) from e
        self.votes.end_vote(failed=False)
        return True

    async def edit(self, content: str, image_url: str | None = None) -> Row:
        """Save new content/image. Author only."""
        if not self.is_author:
            msg = "Only the author can edit this post"
            raise NotAuthorError(msg)
        if not content.strip():
            msg = "Post content cannot be empty."
            raise ValueError(msg)
        row = await self._backend.update_post(
            self.post_id, self.current_user, content.strip(), image_url
        )
        self.post = dict(row)
        return row

    async def delete(self) -> None:
        """Delete the post. Author only."""
        if not self.is_author:
            msg = "Only the author can delete this post"
            raise NotAuthorError(msg)
        await self._backend.delete_post(self.post_id, self.current_user)
