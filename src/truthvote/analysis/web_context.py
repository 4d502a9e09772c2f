"""Best-effort web context for the fact-check prompt.

Queries the DuckDuckGo instant-answer API with the first words of the
claim.  The lookup must never fail the analysis: any error yields a
fixed fallback string.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from truthvote.config.schema import WebContextConfig

logger = logging.getLogger(__name__)

NO_DATA = "No recent data found."
UNAVAILABLE = "Web search unavailable; using model knowledge."


def build_query(claim: str, words: int = 5) -> str:
    """First *words* whitespace-separated words of the claim + "fact check"."""
    return " ".join(claim.split()[:words]) + " fact check"


def _context_from(data: dict[str, Any]) -> str:
    abstract = data.get("Abstract")
    if abstract:
        return str(abstract)
    topics = data.get("RelatedTopics") or []
    texts = [t["Text"] for t in topics if isinstance(t, dict) and t.get("Text")]
    if texts:
        return " ".join(texts)
    return NO_DATA


async def get_web_context(
    claim: str,
    config: WebContextConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Return ``"Recent web context: ..."`` or the fallback string."""
    from truthvote.config.schema import WebContextConfig as WCConfig

    cfg = config or WCConfig()
    if not cfg.enabled:
        return UNAVAILABLE

    params = {
        "q": build_query(claim, cfg.query_words),
        "format": "json",
        "no_html": "1",
        "skip_disambig": "1",
    }
    try:
        if client is not None:
            response = await client.get(cfg.endpoint, params=params)
        else:
            async with httpx.AsyncClient(timeout=cfg.timeout) as own_client:
                response = await own_client.get(cfg.endpoint, params=params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            data = {}
    except Exception as e:
        logger.warning("Web context lookup failed: %s", e)
        return UNAVAILABLE

    return f"Recent web context: {_context_from(data)}"
