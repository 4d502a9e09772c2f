"""Vote endpoints: list with tally, cast once."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from truthvote.api.deps import current_user, get_service, http_error
from truthvote.core.errors import TruthVoteError
from truthvote.views.post import VoteState

router = APIRouter(prefix="/api", tags=["votes"])


class VoteRequest(BaseModel):
    vote_type: Literal["true", "fake"]


class VoteResponse(BaseModel):
    id: str
    post_id: str
    user_name: str
    vote_type: str
    created_at: str


class TallyResponse(BaseModel):
    true: int
    fake: int


class VoteListResponse(BaseModel):
    votes: list[VoteResponse]
    tally: TallyResponse
    user_vote: str | None = None


@router.get("/posts/{post_id}/votes", response_model=VoteListResponse)
async def list_votes(
    post_id: str, request: Request, user: str = ""
) -> VoteListResponse:
    """Votes on a post, the tally, and *user*'s own vote if any."""
    service = get_service(request)
    try:
        await service.get_post(post_id)
    except TruthVoteError as e:
        raise http_error(e) from e
    rows = await service.list_votes(post_id)

    state = VoteState(post_id, user)
    state.load(rows)
    tally = state.tally()
    return VoteListResponse(
        votes=[VoteResponse(**r) for r in rows],
        tally=TallyResponse(true=tally.true, fake=tally.fake),
        user_vote=state.user_vote,
    )


@router.post("/posts/{post_id}/votes", response_model=VoteResponse, status_code=201)
async def cast_vote(
    post_id: str,
    body: VoteRequest,
    request: Request,
    user: Annotated[str, Depends(current_user)],
) -> VoteResponse:
    """Vote once. A second vote by the same user is a 409 ``duplicate_vote``."""
    try:
        row = await get_service(request).cast_vote(post_id, user, body.vote_type)
    except TruthVoteError as e:
        raise http_error(e) from e
    return VoteResponse(**row)
