"""What the view-models need from the outside world.

:class:`~truthvote.service.FeedService` satisfies this protocol
in-process; a remote implementation only has to offer the same calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterable
    from contextlib import AbstractAsyncContextManager

    from truthvote.realtime.events import ChangeEvent

Row = dict[str, Any]


@runtime_checkable
class Backend(Protocol):
    """Row reads/writes plus change-event subscriptions."""

    async def list_posts(self, *, limit: int | None = None) -> list[Row]: ...

    async def list_votes(self, post_id: str) -> list[Row]: ...

    async def cast_vote(self, post_id: str, user_name: str, vote_type: str) -> Row:
        """Insert a vote; raise ``DuplicateVoteError`` if one exists."""
        ...

    async def update_post(
        self,
        post_id: str,
        editor_name: str,
        content: str,
        image_url: str | None = None,
    ) -> Row: ...

    async def delete_post(self, post_id: str, editor_name: str) -> None: ...

    def subscribe(
        self, table: str, *, post_id: str | None = None
    ) -> AbstractAsyncContextManager[AsyncIterable[ChangeEvent]]:
        """Scoped subscription to one table (optionally one post's rows)."""
        ...
