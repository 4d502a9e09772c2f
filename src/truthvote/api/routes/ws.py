"""WebSocket change feeds.

``/ws/posts``                    every posts-table change
``/ws/posts/{post_id}/votes``    vote changes for one post

After accepting, the server sends ``{"type": "subscribed", ...}`` once
the subscription is live, then one frame per change::

    {"type": "change", "table": "votes", "event": "INSERT",
     "new": {...}, "old": {}}

The subscription is held only while the socket is open.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

if TYPE_CHECKING:
    from truthvote.realtime.hub import Subscription
    from truthvote.service import FeedService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/posts")
async def ws_posts(websocket: WebSocket) -> None:
    """Stream inserts, updates and deletes on the posts table."""
    await _serve(websocket, "posts")


@router.websocket("/ws/posts/{post_id}/votes")
async def ws_votes(websocket: WebSocket, post_id: str) -> None:
    """Stream vote inserts and deletes for one post."""
    await _serve(websocket, "votes", post_id=post_id)


async def _serve(
    websocket: WebSocket, table: str, *, post_id: str | None = None
) -> None:
    await websocket.accept()
    service: FeedService = websocket.app.state.feed_service

    try:
        async with service.subscribe(table, post_id=post_id) as sub:
            await websocket.send_json(
                {"type": "subscribed", "table": table, "post_id": post_id}
            )
            await _pump(websocket, sub)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.exception("WebSocket error on %s feed", table)
        with contextlib.suppress(Exception):
            await websocket.send_json({"type": "error", "message": str(e)})
            await websocket.close()


async def _pump(websocket: WebSocket, sub: Subscription) -> None:
    """Forward events until the client disconnects or the hub closes."""

    async def _forward() -> None:
        async for event in sub:
            await websocket.send_json(event.to_message())

    async def _watch_client() -> None:
        # Clients do not send anything meaningful; this only notices a close.
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

    forward = asyncio.create_task(_forward())
    watch = asyncio.create_task(_watch_client())
    done, pending = await asyncio.wait(
        {forward, watch}, return_when=asyncio.FIRST_COMPLETED
    )
    for task in pending:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    for task in done:
        task.result()
    if forward in done:
        with contextlib.suppress(Exception):
            await websocket.close()
