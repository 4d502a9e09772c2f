"""OpenAI provider adapter."""

from __future__ import annotations

import contextlib
import time
from typing import TYPE_CHECKING, Any

import openai

from truthvote.core.errors import (
    ModelNotFoundError,
    ProviderAuthError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from truthvote.providers.base import ModelInfo, ModelResponse, TokenUsage

if TYPE_CHECKING:
    from truthvote.providers.base import PromptMessage

PROVIDER_ID = "openai"

_KNOWN_MODELS: list[dict[str, Any]] = [
    {
        "model_id": "gpt-4o",
        "display_name": "GPT-4o",
        "context_window": 128_000,
        "max_output_tokens": 16_384,
        "input_cost_per_mtok": 2.50,
        "output_cost_per_mtok": 10.00,
    },
    {
        "model_id": "gpt-4o-mini",
        "display_name": "GPT-4o mini",
        "context_window": 128_000,
        "max_output_tokens": 16_384,
        "input_cost_per_mtok": 0.15,
        "output_cost_per_mtok": 0.60,
    },
]


def _map_error(e: openai.APIError) -> Exception:
    """Map OpenAI SDK errors to the truthvote error hierarchy."""
    if isinstance(e, openai.AuthenticationError):
        return ProviderAuthError(PROVIDER_ID, str(e))
    if isinstance(e, openai.RateLimitError):
        retry_after = None
        if hasattr(e, "response") and e.response is not None:
            raw = e.response.headers.get("retry-after")
            if raw is not None:
                with contextlib.suppress(ValueError):
                    retry_after = float(raw)
        return ProviderRateLimitError(PROVIDER_ID, retry_after=retry_after)
    if isinstance(e, openai.APITimeoutError):
        return ProviderTimeoutError(PROVIDER_ID, str(e))
    if isinstance(e, openai.InternalServerError):
        return ProviderOverloadedError(PROVIDER_ID, str(e))
    if isinstance(e, openai.NotFoundError):
        return ModelNotFoundError(PROVIDER_ID, str(e))
    return ProviderOverloadedError(PROVIDER_ID, str(e))


def _build_messages(messages: list[PromptMessage]) -> list[dict[str, str]]:
    """Convert PromptMessages to OpenAI chat message format."""
    return [{"role": msg.role, "content": msg.content} for msg in messages]


class OpenAIProvider:
    """Provider adapter for OpenAI chat models."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        if client is not None:
            self._client = client
        else:
            kwargs: dict[str, Any] = {}
            if api_key is not None:
                kwargs["api_key"] = api_key
            if base_url is not None:
                kwargs["base_url"] = base_url
            self._client = openai.AsyncOpenAI(**kwargs)

    @property
    def provider_id(self) -> str:
        return PROVIDER_ID

    async def send(
        self,
        messages: list[PromptMessage],
        model_id: str,
        *,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: str | None = None,
    ) -> ModelResponse:
        kwargs: dict[str, Any] = {
            "model": model_id,
            "max_completion_tokens": max_tokens,
            "messages": _build_messages(messages),
            "temperature": temperature,
        }
        if response_format == "json":
            kwargs["response_format"] = {"type": "json_object"}

        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIError as e:
            raise _map_error(e) from e

        latency_ms = (time.monotonic() - start) * 1000

        if response.choices:
            content = response.choices[0].message.content or ""
            finish_reason = response.choices[0].finish_reason or "stop"
        else:
            content = ""
            finish_reason = "stop"

        if response.usage:
            usage = TokenUsage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )
        else:
            usage = TokenUsage(input_tokens=0, output_tokens=0)

        return ModelResponse(
            content=content,
            model_info=self._resolve_model_info(model_id),
            usage=usage,
            finish_reason=finish_reason,
            latency_ms=latency_ms,
            raw_response=response,
        )

    async def health_check(self) -> bool:
        try:
            await self._client.models.list()
        except Exception:
            return False
        return True

    def _resolve_model_info(self, model_id: str) -> ModelInfo:
        """Look up ModelInfo for a model_id, or create a generic one."""
        for m in _KNOWN_MODELS:
            if m["model_id"] == model_id:
                return ModelInfo(provider_id=PROVIDER_ID, **m)
        return ModelInfo(
            provider_id=PROVIDER_ID,
            model_id=model_id,
            display_name=f"OpenAI ({model_id})",
            context_window=128_000,
            max_output_tokens=4096,
            input_cost_per_mtok=0.0,
            output_cost_per_mtok=0.0,
        )
