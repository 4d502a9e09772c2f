"""Provider adapter interface and data classes.

All provider adapters implement the ``ModelProvider`` protocol.
Data classes are immutable where possible (frozen dataclasses with slots).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """Static metadata about a model available through a provider."""

    provider_id: str  # e.g. "openai", "google"
    model_id: str  # e.g. "gpt-4o", "gemini-2.5-pro"
    display_name: str  # Human-readable: "GPT-4o"
    context_window: int  # Max tokens (input + output)
    max_output_tokens: int
    input_cost_per_mtok: float  # USD per million input tokens
    output_cost_per_mtok: float  # USD per million output tokens

    @property
    def model_ref(self) -> str:
        """Canonical reference: ``provider_id:model_id``."""
        return f"{self.provider_id}:{self.model_id}"


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """Token counts from a single model call."""

    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(slots=True)
class ModelResponse:
    """Complete response from a model call."""

    content: str
    model_info: ModelInfo
    usage: TokenUsage
    finish_reason: str  # "stop", "max_tokens", ...
    latency_ms: float  # Wall-clock time for the call
    raw_response: object = field(default=None, repr=False)

    @property
    def cost_usd(self) -> float:
        """Cost of this call from the model's per-million-token prices."""
        info = self.model_info
        return (
            self.usage.input_tokens * info.input_cost_per_mtok
            + self.usage.output_tokens * info.output_cost_per_mtok
        ) / 1_000_000


@dataclass(frozen=True, slots=True)
class PromptMessage:
    """A single message in a prompt sequence."""

    role: str  # "system", "user", "assistant"
    content: str


@runtime_checkable
class ModelProvider(Protocol):
    """Protocol that all provider adapters must satisfy.

    Implementations are stateless: they hold connection config but no
    conversation state.
    """

    @property
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai', 'google')."""
        ...

    async def send(
        self,
        messages: list[PromptMessage],
        model_id: str,
        *,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: str | None = None,
    ) -> ModelResponse:
        """Send a prompt and wait for complete response.

        Args:
            messages: Prompt messages.
            model_id: Model to use.
            max_tokens: Max output tokens.
            temperature: Sampling temperature.
            response_format: If ``"json"``, request JSON output mode.

        Raises ProviderError on failure.
        """
        ...

    async def health_check(self) -> bool:
        """Verify the provider is reachable and credentials are valid.

        Returns True if healthy, False otherwise. Must not raise.
        """
        ...
