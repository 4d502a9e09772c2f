"""LLM provider adapters."""

from truthvote.providers.base import (
    ModelInfo,
    ModelProvider,
    ModelResponse,
    PromptMessage,
    TokenUsage,
)

__all__ = [
    "ModelInfo",
    "ModelProvider",
    "ModelResponse",
    "PromptMessage",
    "TokenUsage",
]
