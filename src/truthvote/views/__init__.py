"""View-models holding feed and vote reconciliation state."""

from truthvote.views.backend import Backend
from truthvote.views.feed import FeedState, FeedView
from truthvote.views.post import (
    PostView,
    VoteBlockedError,
    VoteError,
    VoteState,
    VoteTally,
)

__all__ = [
    "Backend",
    "FeedState",
    "FeedView",
    "PostView",
    "VoteBlockedError",
    "VoteError",
    "VoteState",
    "VoteTally",
]
