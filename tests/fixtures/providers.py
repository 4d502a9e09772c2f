"""Mock provider for deterministic testing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from truthvote.providers.base import ModelInfo, ModelResponse, TokenUsage

if TYPE_CHECKING:
    from truthvote.providers.base import PromptMessage


class MockProvider:
    """Deterministic provider for tests.

    Returns canned responses keyed by model_id, or raises ``error`` if
    one was given.  Records all calls for assertion.
    """

    def __init__(
        self,
        provider_id: str = "mock",
        responses: dict[str, str] | None = None,
        *,
        default: str = "",
        error: Exception | None = None,
        healthy: bool = True,
    ) -> None:
        self._provider_id = provider_id
        self._responses = responses or {}
        self._default = default
        self._error = error
        self._healthy = healthy
        self.call_log: list[dict[str, Any]] = []

    @property
    def provider_id(self) -> str:
        return self._provider_id

    def _model_info(self, model_id: str) -> ModelInfo:
        return ModelInfo(
            provider_id=self._provider_id,
            model_id=model_id,
            display_name=f"Mock {model_id}",
            context_window=128_000,
            max_output_tokens=4096,
            input_cost_per_mtok=0.0,
            output_cost_per_mtok=0.0,
        )

    async def send(
        self,
        messages: list[PromptMessage],
        model_id: str,
        *,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: str | None = None,
    ) -> ModelResponse:
        self.call_log.append(
            {
                "model_id": model_id,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "response_format": response_format,
            }
        )
        if self._error is not None:
            raise self._error
        content = self._responses.get(model_id, self._default)
        return ModelResponse(
            content=content,
            model_info=self._model_info(model_id),
            usage=TokenUsage(input_tokens=100, output_tokens=len(content.split())),
            finish_reason="stop",
            latency_ms=1.0,
        )

    async def health_check(self) -> bool:
        return self._healthy
