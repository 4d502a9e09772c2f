"""Core types, errors, and shared utilities."""

from truthvote.core.errors import (
    AnalysisError,
    ConfigError,
    ConstraintViolationError,
    DuplicateVoteError,
    ModelNotFoundError,
    NotAuthorError,
    NotFoundError,
    ProviderAuthError,
    ProviderError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    StorageError,
    TruthVoteError,
)
from truthvote.core.log import configure_logging

__all__ = [
    "AnalysisError",
    "ConfigError",
    "ConstraintViolationError",
    "DuplicateVoteError",
    "ModelNotFoundError",
    "NotAuthorError",
    "NotFoundError",
    "ProviderAuthError",
    "ProviderError",
    "ProviderOverloadedError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "StorageError",
    "TruthVoteError",
    "configure_logging",
]
