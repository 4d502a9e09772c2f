"""AI-assisted fact checking."""

from truthvote.analysis.checker import (
    AnalysisResult,
    CombinedAnalysis,
    FactChecker,
    ProviderSlot,
    aggregate,
    analyze_with,
    build_fact_checker,
    normalize_result,
    verdict_for,
)
from truthvote.analysis.web_context import get_web_context

__all__ = [
    "AnalysisResult",
    "CombinedAnalysis",
    "FactChecker",
    "ProviderSlot",
    "aggregate",
    "analyze_with",
    "build_fact_checker",
    "get_web_context",
    "normalize_result",
    "verdict_for",
]
