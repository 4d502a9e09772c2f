"""Fact-check prompt template."""

from __future__ import annotations

from datetime import UTC, date, datetime

_TEMPLATE = """\
You are a neutral, expert fact-checker. Analyze this claim for truthfulness \
using logical steps and current web knowledge (as of {today}).{guidance}

Claim: {claim}

{web_context}

Steps:
1. Break down the claim into 2-3 key facts.
2. For each fact, reason: Is it verifiable? Cite 1-2 recent sources (real URLs \
if possible, e.g., from news sites like BBC, Reuters, or official .gov).
3. Assess evidence strength: Strong (multiple corroborating sources), Weak \
(conflicting/single source), None (unverifiable).
4. Calculate true_rate: Percentage (0-100) based on evidence (e.g., 90% if 2/3 \
facts strong).

Output ONLY valid JSON: {{ "verdict": "True" if >70%, "False" if <30%, else \
"Mixed", "true_rate": 85, "reasoning": ["Bullet 1", "Bullet 2"], "sources": \
["https://example.com/source1", "https://example.com/source2"] }}.

Be precise, unbiased, and cite diverse sources. Avoid speculation."""

GEMINI_GUIDANCE = (
    "Cross-reference with OpenAI's style for consistency. Use your safety "
    "filters but prioritize factual depth. For real-time: Simulate querying "
    "search engines for latest data on key facts from claim."
)


def build_prompt(
    claim: str,
    web_context: str,
    *,
    today: date | None = None,
    guidance: str = "",
) -> str:
    """Render the fact-check prompt for one claim.

    Args:
        claim: Post text (plus image reference, if any).
        web_context: Output of :func:`~truthvote.analysis.web_context.get_web_context`.
        today: Date stamped into the prompt; defaults to today (UTC).
        guidance: Provider-specific sentence(s) appended to the preamble.
    """
    stamp = (today or datetime.now(UTC).date()).isoformat()
    return _TEMPLATE.format(
        today=stamp,
        guidance=f" {guidance}" if guidance else "",
        claim=claim,
        web_context=web_context,
    )
