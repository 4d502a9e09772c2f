"""Pull a JSON object out of free-form model output.

Models asked for "ONLY valid JSON" still wrap it in prose or markdown
fences often enough that a plain ``json.loads`` is not sufficient.
"""

from __future__ import annotations

import json
import re
from typing import Any

from truthvote.core.errors import AnalysisError

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
# Outermost braces, greedy: the fact-check payload nests lists, not objects.
_BRACES_RE = re.compile(r"\{.*\}", re.DOTALL)


class JSONExtractionError(AnalysisError):
    """Raised when JSON cannot be extracted from text."""


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        result = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return result if isinstance(result, dict) else None


def extract_json(text: str) -> dict[str, Any]:
    """Extract a JSON object from text.

    Tries strategies in order:
    1. Direct ``json.loads()`` on the full text
    2. Extract from markdown code fences (```json ... ```)
    3. Everything from the first ``{`` to the last ``}``

    Raises:
        JSONExtractionError: If no valid JSON object can be found.
    """
    stripped = text.strip()
    if not stripped:
        msg = "Empty text"
        raise JSONExtractionError(msg)

    result = _loads_object(stripped)
    if result is not None:
        return result

    match = _JSON_BLOCK_RE.search(text)
    if match:
        result = _loads_object(match.group(1))
        if result is not None:
            return result

    match = _BRACES_RE.search(text)
    if match:
        result = _loads_object(match.group(0))
        if result is not None:
            return result

    msg = "No valid JSON object found in text"
    raise JSONExtractionError(msg)
