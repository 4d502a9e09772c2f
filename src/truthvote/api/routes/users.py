"""User endpoints: create-or-get by display name."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from truthvote.api.deps import get_service, http_error

router = APIRouter(prefix="/api", tags=["users"])


class UserRequest(BaseModel):
    name: str


class UserResponse(BaseModel):
    id: str
    name: str
    created_at: str


@router.post("/users", response_model=UserResponse)
async def upsert_user(body: UserRequest, request: Request) -> UserResponse:
    """Register a display name, or return it if it already exists."""
    try:
        row = await get_service(request).upsert_user(body.name)
    except ValueError as e:
        raise http_error(e) from e
    return UserResponse(**row)
