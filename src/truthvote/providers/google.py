"""Google (Gemini) provider adapter."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from google import genai
from google.genai import errors as genai_errors

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

PROVIDER_ID = "google"

_KNOWN_MODELS: list[dict[str, Any]] = [
    {
        "model_id": "gemini-2.5-pro",
        "display_name": "Gemini 2.5 Pro",
        "context_window": 1_048_576,
        "max_output_tokens": 65_536,
        "input_cost_per_mtok": 1.25,
        "output_cost_per_mtok": 10.00,
    },
    {
        "model_id": "gemini-2.5-flash",
        "display_name": "Gemini 2.5 Flash",
        "context_window": 1_048_576,
        "max_output_tokens": 65_536,
        "input_cost_per_mtok": 0.30,
        "output_cost_per_mtok": 2.50,
    },
]


def _map_error(e: Exception) -> Exception:
    """Map Google GenAI errors to the truthvote error hierarchy."""
    msg = str(e)
    if isinstance(e, genai_errors.ClientError):
        lower = msg.lower()
        if "api key" in lower or "auth" in lower or "permission" in lower:
            return ProviderAuthError(PROVIDER_ID, msg)
        if "not found" in lower or "404" in lower:
            return ModelNotFoundError(PROVIDER_ID, msg)
        if "429" in lower or "rate" in lower:
            return ProviderRateLimitError(PROVIDER_ID)
        return ProviderTimeoutError(PROVIDER_ID, msg)
    return ProviderOverloadedError(PROVIDER_ID, msg)


def _build_contents(
    messages: list[PromptMessage],
) -> tuple[str | None, list[dict[str, Any]]]:
    """Split PromptMessages into system instruction + contents."""
    system: str | None = None
    contents: list[dict[str, Any]] = []

    for msg in messages:
        if msg.role == "system":
            system = msg.content
        else:
            role = "model" if msg.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg.content}]})

    return system, contents


class GoogleProvider:
    """Provider adapter for Google Gemini models."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)

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
        system, contents = _build_contents(messages)

        config_kwargs: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
            "system_instruction": system,
        }
        if response_format == "json":
            config_kwargs["response_mime_type"] = "application/json"

        config = genai.types.GenerateContentConfig(**config_kwargs)

        start = time.monotonic()
        try:
            response = await self._client.aio.models.generate_content(
                model=model_id,
                contents=contents,
                config=config,
            )
        except (genai_errors.ClientError, genai_errors.ServerError) as e:
            raise _map_error(e) from e

        latency_ms = (time.monotonic() - start) * 1000

        input_tokens = 0
        output_tokens = 0
        if response.usage_metadata:
            input_tokens = response.usage_metadata.prompt_token_count or 0
            output_tokens = response.usage_metadata.candidates_token_count or 0

        return ModelResponse(
            content=response.text or "",
            model_info=self._resolve_model_info(model_id),
            usage=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens),
            finish_reason="stop",
            latency_ms=latency_ms,
            raw_response=response,
        )

    async def health_check(self) -> bool:
        try:
            await self._client.aio.models.generate_content(
                model="gemini-2.5-flash",
                contents="ping",
                config=genai.types.GenerateContentConfig(max_output_tokens=1),
            )
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
            display_name=f"Gemini ({model_id})",
            context_window=1_048_576,
            max_output_tokens=8192,
            input_cost_per_mtok=0.0,
            output_cost_per_mtok=0.0,
        )
