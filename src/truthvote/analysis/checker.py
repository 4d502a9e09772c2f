"""Dual-model fact check: two providers in parallel, one combined verdict.

Each provider call is fault-tolerant on its own.  A slot with no
provider, a provider that raises, or output that is not JSON all turn
into a neutral placeholder (``Mixed``, 50), so aggregation always has two
results to work with and never raises.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from truthvote.analysis.json_extract import extract_json
from truthvote.analysis.prompts import GEMINI_GUIDANCE, build_prompt
from truthvote.analysis.web_context import get_web_context
from truthvote.providers.base import PromptMessage

if TYPE_CHECKING:
    from datetime import date

    import httpx

    from truthvote.config.schema import AnalysisConfig
    from truthvote.providers.base import ModelProvider

logger = logging.getLogger(__name__)

Verdict = Literal["True", "False", "Mixed"]
VERDICTS: tuple[str, ...] = ("True", "False", "Mixed")

TRUE_THRESHOLD = 70
FALSE_THRESHOLD = 30


# ── Data classes ─────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """One provider's verdict on a claim."""

    verdict: Verdict
    true_rate: int
    reasoning: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()

    @classmethod
    def placeholder(cls, reason: str) -> AnalysisResult:
        """Neutral result used when a provider cannot answer."""
        return cls(verdict="Mixed", true_rate=50, reasoning=(reason,), sources=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict,
            "true_rate": self.true_rate,
            "reasoning": list(self.reasoning),
            "sources": list(self.sources),
        }


@dataclass(frozen=True, slots=True)
class CombinedAnalysis:
    """Averaged verdict across both providers."""

    true_rate: int
    verdict: Verdict
    reasoning: tuple[str, ...]
    sources: tuple[str, ...]
    models: dict[str, AnalysisResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "true_rate": self.true_rate,
            "verdict": self.verdict,
            "reasoning": list(self.reasoning),
            "sources": list(self.sources),
            "models": {k: v.to_dict() for k, v in self.models.items()},
        }


@dataclass(slots=True)
class ProviderSlot:
    """One of the two analysis positions.

    ``provider`` is None when no credential was configured.
    """

    key: str  # "openai", "gemini"
    label: str  # prefix for reasoning lines: "OpenAI", "Gemini"
    model_id: str
    provider: ModelProvider | None = None
    guidance: str = ""


# ── Normalisation ────────────────────────────────────────────────


def verdict_for(true_rate: float) -> Verdict:
    """Map a true-rate to a verdict: >70 True, <30 False, else Mixed."""
    if true_rate > TRUE_THRESHOLD:
        return "True"
    if true_rate < FALSE_THRESHOLD:
        return "False"
    return "Mixed"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _as_str_list(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else default
    if isinstance(value, list | tuple):
        items = tuple(str(v) for v in value if v is not None and str(v).strip())
        return items
    return default


def normalize_result(data: dict[str, Any]) -> AnalysisResult:
    """Coerce a provider's JSON payload into an :class:`AnalysisResult`."""
    verdict = data.get("verdict")
    if verdict not in VERDICTS:
        verdict = "Mixed"

    raw_rate = data.get("true_rate")
    if isinstance(raw_rate, str):
        raw_rate = raw_rate.strip().rstrip("%")
    try:
        rate = float(raw_rate)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        rate = 50.0
    if math.isnan(rate):
        rate = 50.0
    true_rate = _round_half_up(min(100.0, max(0.0, rate)))

    reasoning = _as_str_list(data.get("reasoning"), ("Analysis unavailable",))
    sources = _as_str_list(data.get("sources"), ())

    return AnalysisResult(
        verdict=verdict,
        true_rate=true_rate,
        reasoning=reasoning,
        sources=sources,
    )


# ── Provider call ────────────────────────────────────────────────


async def analyze_with(
    slot: ProviderSlot,
    claim: str,
    web_context: str = "",
    *,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    today: date | None = None,
) -> AnalysisResult:
    """Ask one provider for a verdict. Never raises."""
    if slot.provider is None:
        return AnalysisResult.placeholder(f"{slot.label} API key not configured")

    prompt = build_prompt(claim, web_context, today=today, guidance=slot.guidance)
    messages = [PromptMessage(role="user", content=prompt)]
    try:
        response = await slot.provider.send(
            messages,
            slot.model_id,
            max_tokens=max_tokens,
            temperature=temperature,
            response_format="json",
        )
        result = normalize_result(extract_json(response.content))
    except Exception as e:
        logger.warning("%s analysis failed: %s", slot.label, e)
        return AnalysisResult.placeholder(
            f"{slot.label} analysis temporarily unavailable"
        )

    logger.info(
        "%s verdict %s (%d%%) from %s in %.0fms, %d tokens, $%.4f",
        slot.label,
        result.verdict,
        result.true_rate,
        response.model_info.model_ref,
        response.latency_ms,
        response.usage.total_tokens,
        response.cost_usd,
    )
    return result


# ── Aggregation ──────────────────────────────────────────────────


def aggregate(
    first: AnalysisResult,
    second: AnalysisResult,
    *,
    labels: tuple[str, str] = ("OpenAI", "Gemini"),
    keys: tuple[str, str] = ("openai", "gemini"),
) -> CombinedAnalysis:
    """Combine two results.

    The verdict is derived from the averaged rate only; the per-model
    verdicts do not vote.
    """
    true_rate = _round_half_up((first.true_rate + second.true_rate) / 2)
    reasoning = tuple(f"{labels[0]}: {r}" for r in first.reasoning) + tuple(
        f"{labels[1]}: {r}" for r in second.reasoning
    )
    sources = tuple(dict.fromkeys((*first.sources, *second.sources)))
    return CombinedAnalysis(
        true_rate=true_rate,
        verdict=verdict_for(true_rate),
        reasoning=reasoning,
        sources=sources,
        models={keys[0]: first, keys[1]: second},
    )


# ── Public API ───────────────────────────────────────────────────


class FactChecker:
    """Runs the web lookup and both provider slots for a claim."""

    def __init__(
        self,
        first: ProviderSlot,
        second: ProviderSlot,
        config: AnalysisConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        from truthvote.config.schema import AnalysisConfig as AConfig

        self.first = first
        self.second = second
        self._config = config or AConfig()
        self._http_client = http_client

    @property
    def slots(self) -> tuple[ProviderSlot, ProviderSlot]:
        return self.first, self.second

    async def analyze(
        self,
        text: str,
        image_url: str | None = None,
        *,
        today: date | None = None,
    ) -> CombinedAnalysis:
        """Fact-check a post's text (and image reference, if any)."""
        full_text = text + (f" Image: {image_url}" if image_url else "")
        web_context = await get_web_context(
            text, self._config.web_context, client=self._http_client
        )

        first, second = await asyncio.gather(
            *(
                analyze_with(
                    slot,
                    full_text,
                    web_context,
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                    today=today,
                )
                for slot in self.slots
            )
        )
        combined = aggregate(
            first,
            second,
            labels=(self.first.label, self.second.label),
            keys=(self.first.key, self.second.key),
        )
        logger.info(
            "Combined verdict %s (%d%%) from %s and %s",
            combined.verdict,
            combined.true_rate,
            self.first.label,
            self.second.label,
        )
        return combined


def build_fact_checker(
    providers: dict[str, ModelProvider | None],
    config: AnalysisConfig | None = None,
    *,
    openai_model: str = "gpt-4o",
    gemini_model: str = "gemini-2.5-pro",
    openai_label: str = "OpenAI",
    gemini_label: str = "Gemini",
) -> FactChecker:
    """Assemble the standard OpenAI + Gemini checker from provider instances."""
    return FactChecker(
        ProviderSlot(
            key="openai",
            label=openai_label,
            model_id=openai_model,
            provider=providers.get("openai"),
        ),
        ProviderSlot(
            key="gemini",
            label=gemini_label,
            model_id=gemini_model,
            provider=providers.get("google"),
            guidance=GEMINI_GUIDANCE,
        ),
        config,
    )
