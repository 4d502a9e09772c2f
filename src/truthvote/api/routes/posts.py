"""Post endpoints: feed listing, create, edit, delete."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from truthvote.api.deps import current_user, get_service, http_error
from truthvote.core.errors import TruthVoteError

router = APIRouter(prefix="/api", tags=["posts"])


class PostRequest(BaseModel):
    # Length is enforced by the database, not here.
    content: str
    image_url: str | None = None


class PostResponse(BaseModel):
    id: str
    author_name: str
    content: str
    image_url: str | None = None
    created_at: str
    updated_at: str


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    total: int


@router.get("/posts", response_model=PostListResponse)
async def list_posts(request: Request, limit: int | None = None) -> PostListResponse:
    """All posts, newest first."""
    effective = limit or request.app.state.config.general.feed_limit
    rows = await get_service(request).list_posts(limit=effective)
    posts = [PostResponse(**r) for r in rows]
    return PostListResponse(posts=posts, total=len(posts))


@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(
    body: PostRequest,
    request: Request,
    user: Annotated[str, Depends(current_user)],
) -> PostResponse:
    try:
        row = await get_service(request).create_post(
            user, body.content, body.image_url
        )
    except (TruthVoteError, ValueError) as e:
        raise http_error(e) from e
    return PostResponse(**row)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, request: Request) -> PostResponse:
    try:
        row = await get_service(request).get_post(post_id)
    except TruthVoteError as e:
        raise http_error(e) from e
    return PostResponse(**row)


@router.patch("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    body: PostRequest,
    request: Request,
    user: Annotated[str, Depends(current_user)],
) -> PostResponse:
    """Replace content and image. Only the author may edit."""
    try:
        row = await get_service(request).update_post(
            post_id, user, body.content, body.image_url
        )
    except (TruthVoteError, ValueError) as e:
        raise http_error(e) from e
    return PostResponse(**row)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    request: Request,
    user: Annotated[str, Depends(current_user)],
) -> Response:
    """Delete a post and its votes. Only the author may delete."""
    try:
        await get_service(request).delete_post(post_id, user)
    except TruthVoteError as e:
        raise http_error(e) from e
    return Response(status_code=204)
