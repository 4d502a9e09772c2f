"""Feed view-model: newest-first post list kept in sync by change events.

Events are applied incrementally; the collection is never refetched
after the initial load.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

from truthvote.realtime.events import ChangeType

if TYPE_CHECKING:
    from types import TracebackType

    from truthvote.realtime.events import ChangeEvent
    from truthvote.views.backend import Backend

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class FeedState:
    """Ordered list of post rows, newest first."""

    def __init__(self) -> None:
        self.posts: list[Row] = []

    def load(self, rows: list[Row]) -> None:
        self.posts = list(rows)

    def ids(self) -> list[str]:
        return [p["id"] for p in self.posts]

    def apply(self, event: ChangeEvent) -> None:
        """Patch the list with one posts-table event."""
        if event.type is ChangeType.INSERT:
            if any(p["id"] == event.new["id"] for p in self.posts):
                return
            self.posts = [event.new, *self.posts]
        elif event.type is ChangeType.DELETE:
            post_id = event.old.get("id")
            self.posts = [p for p in self.posts if p["id"] != post_id]
        elif event.type is ChangeType.UPDATE:
            post_id = event.new.get("id")
            self.posts = [event.new if p["id"] == post_id else p for p in self.posts]

    def patch(self, post_id: str, content: str, image_url: str | None) -> None:
        """Apply a just-saved edit before its UPDATE event arrives."""
        self.posts = [
            {**p, "content": content, "image_url": image_url}
            if p["id"] == post_id
            else p
            for p in self.posts
        ]


class FeedView:
    """Live feed for the lifetime of an ``async with`` block.

    On enter: subscribe to the posts table, then load all posts.  Events
    are applied by a background task until the block exits, at which
    point the task is cancelled and the subscription released.
    """

    def __init__(self, backend: Backend, *, limit: int | None = None) -> None:
        self._backend = backend
        self._limit = limit
        self.state = FeedState()
        self._stack: AsyncExitStack | None = None
        self._task: asyncio.Task[None] | None = None
        self._changed = asyncio.Event()

    @property
    def posts(self) -> list[Row]:
        return self.state.posts

    async def __aenter__(self) -> FeedView:
        stack = AsyncExitStack()
        try:
            # Subscribe before loading so no change between the two is lost.
            sub = await stack.enter_async_context(self._backend.subscribe("posts"))
            self.state.load(await self._backend.list_posts(limit=self._limit))
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
            logger.debug("Feed event %s for post %s", event.type, event.row.get("id"))
            self.state.apply(event)
            self._changed.set()

    async def wait_for_change(self) -> None:
        """Block until at least one event has been applied since last call."""
        await self._changed.wait()
        self._changed.clear()

    def patch(self, post_id: str, content: str, image_url: str | None) -> None:
        self.state.patch(post_id, content, image_url)
