"""In-process change hub: publish row changes, subscribe per table.

A subscription is a scoped resource.  ``ChangeHub.subscribe`` is an
async context manager: the subscription starts receiving events when the
block is entered and is removed from the hub when the block exits,
however it exits.

    async with hub.subscribe("votes", post_id=pid) as sub:
        async for event in sub:
            ...
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from truthvote.realtime.events import ChangeEvent

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """Receives the events of one table, optionally scoped to one post."""

    def __init__(self, table: str, *, post_id: str | None = None) -> None:
        self.table = table
        self.post_id = post_id
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        if self.post_id is None:
            return True
        return event.row.get("post_id") == self.post_id

    def deliver(self, event: ChangeEvent) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def close(self) -> None:
        """Stop delivery; a pending ``get`` or iteration ends."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    async def get(self) -> ChangeEvent | None:
        """Wait for the next event. Returns None once closed."""
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ChangeEvent]:
        while True:
            event = await self.get()
            if event is None:
                return
            yield event


class ChangeHub:
    """Fan-out of :class:`ChangeEvent` to matching subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver *event* to every matching subscription without blocking.

        Returns:
            Number of subscriptions the event was delivered to.
        """
        delivered = 0
        for sub in list(self._subscriptions):
            if sub.matches(event):
                sub.deliver(event)
                delivered += 1
        logger.debug(
            "Published %s on %s to %d subscriber(s)",
            event.type.value,
            event.table,
            delivered,
        )
        return delivered

    @asynccontextmanager
    async def subscribe(
        self, table: str, *, post_id: str | None = None
    ) -> AsyncIterator[Subscription]:
        """Open a subscription for the duration of the ``async with`` block."""
        sub = Subscription(table, post_id=post_id)
        self._subscriptions.add(sub)
        try:
            yield sub
        finally:
            self._subscriptions.discard(sub)
            sub.close()

    def close_all(self) -> None:
        """End every open subscription (server shutdown)."""
        for sub in list(self._subscriptions):
            sub.close()
        self._subscriptions.clear()
