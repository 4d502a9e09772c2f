"""Exception hierarchy for truthvote.

Every module imports from here. The hierarchy is:

    TruthVoteError
    ├── ProviderError(provider_id)
    │   ├── ProviderAuthError
    │   ├── ProviderRateLimitError(retry_after)
    │   ├── ProviderTimeoutError
    │   ├── ProviderOverloadedError
    │   └── ModelNotFoundError
    ├── AnalysisError
    ├── ConfigError
    └── StorageError
        ├── NotFoundError
        ├── NotAuthorError
        └── ConstraintViolationError
            └── DuplicateVoteError(post_id, user_name)
"""

from __future__ import annotations


class TruthVoteError(Exception):
    """Base exception for all truthvote errors."""


# ─── Provider Errors ──────────────────────────────────────────


class ProviderError(TruthVoteError):
    """Base for provider-related errors."""

    def __init__(self, provider_id: str, message: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"[{provider_id}] {message}")


class ProviderAuthError(ProviderError):
    """Invalid or missing API key."""


class ProviderRateLimitError(ProviderError):
    """Rate limit exceeded. Includes retry_after if available."""

    def __init__(self, provider_id: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        msg = "Rate limited"
        if retry_after is not None:
            msg += f" (retry after {retry_after}s)"
        super().__init__(provider_id, msg)


class ProviderTimeoutError(ProviderError):
    """Model call timed out."""


class ProviderOverloadedError(ProviderError):
    """Provider is overloaded (529, 503)."""


class ModelNotFoundError(ProviderError):
    """Requested model not available from this provider."""


# ─── Analysis Errors ──────────────────────────────────────────


class AnalysisError(TruthVoteError):
    """Model output could not be turned into an analysis result."""


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(TruthVoteError):
    """Invalid configuration."""


# ─── Storage Errors ───────────────────────────────────────────


class StorageError(TruthVoteError):
    """Database or persistence layer error."""


class NotFoundError(StorageError):
    """Requested row does not exist."""


class NotAuthorError(StorageError):
    """Only the author of a post may edit or delete it."""


class ConstraintViolationError(StorageError):
    """A write was rejected by a storage-level constraint."""


class DuplicateVoteError(ConstraintViolationError):
    """The voter already has a vote on this post."""

    def __init__(self, post_id: str, user_name: str) -> None:
        self.post_id = post_id
        self.user_name = user_name
        super().__init__(f"{user_name} already voted on post {post_id}")
