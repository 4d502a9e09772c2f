"""Shared request dependencies and domain-error translation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Header, HTTPException, Request

from truthvote.core.errors import (
    ConstraintViolationError,
    DuplicateVoteError,
    NotAuthorError,
    NotFoundError,
)

if TYPE_CHECKING:
    from truthvote.service import FeedService


def get_service(request: Request) -> FeedService:
    return request.app.state.feed_service


def current_user(
    x_user_name: Annotated[str | None, Header(alias="X-User-Name")] = None,
) -> str:
    """Display name of the caller. There is no password."""
    name = (x_user_name or "").strip()
    if not name:
        raise HTTPException(status_code=401, detail="X-User-Name header required")
    return name


def http_error(e: Exception) -> HTTPException:
    """Translate a domain error into the matching HTTP error."""
    if isinstance(e, DuplicateVoteError):
        return HTTPException(
            status_code=409,
            detail={"code": "duplicate_vote", "message": str(e)},
        )
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, NotAuthorError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, ConstraintViolationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
