"""Persistence: users, posts and votes."""

from truthvote.memory.models import (
    MAX_CONTENT_LENGTH,
    VOTE_TYPES,
    Base,
    Post,
    User,
    Vote,
)
from truthvote.memory.repository import FeedRepository

__all__ = [
    "MAX_CONTENT_LENGTH",
    "VOTE_TYPES",
    "Base",
    "FeedRepository",
    "Post",
    "User",
    "Vote",
]
