"""POST /api/posts/{id}/analysis -- dual-model fact check of a post."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from truthvote.api.deps import get_service, http_error
from truthvote.core.errors import TruthVoteError

router = APIRouter(prefix="/api", tags=["analysis"])


class ModelVerdict(BaseModel):
    verdict: str
    true_rate: int
    reasoning: list[str]
    sources: list[str]


class AnalysisResponse(ModelVerdict):
    models: dict[str, ModelVerdict] = Field(default_factory=dict)


@router.post("/posts/{post_id}/analysis", response_model=AnalysisResponse)
async def analyze_post(post_id: str, request: Request) -> AnalysisResponse:
    """Run both providers on the post and return the combined verdict.

    Provider problems never fail this endpoint; they show up as neutral
    placeholder results inside ``models``.
    """
    try:
        post = await get_service(request).get_post(post_id)
    except TruthVoteError as e:
        raise http_error(e) from e

    checker = request.app.state.fact_checker
    combined = await checker.analyze(post["content"], post["image_url"])
    return AnalysisResponse.model_validate(combined.to_dict())
