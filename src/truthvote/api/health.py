"""Health check endpoints."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request

if TYPE_CHECKING:
    from truthvote.analysis.checker import ProviderSlot

router = APIRouter(tags=["health"])

_START_TIME = time.monotonic()


@router.get("/api/health")
async def health() -> dict[str, str]:
    """Basic health check -- always returns quickly."""
    return {"status": "ok"}


@router.get("/api/health/detailed")
async def health_detailed(request: Request) -> dict[str, Any]:
    """Database, analysis provider and realtime status."""
    from truthvote import __version__

    checks: dict[str, Any] = {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round(time.monotonic() - _START_TIME, 1),
        "components": {},
    }

    try:
        db_factory = request.app.state.db_factory
        async with db_factory() as session:
            from sqlalchemy import text

            await session.execute(text("SELECT 1"))
        checks["components"]["database"] = {"status": "ok"}
    except Exception as e:
        checks["components"]["database"] = {"status": "error", "detail": str(e)}
        checks["status"] = "degraded"

    checker = getattr(request.app.state, "fact_checker", None)
    if checker is not None:
        slots = await _check_slots(checker.slots)
        checks["components"]["analysis"] = slots

        # Placeholders still answer; only all-unreachable providers degrade.
        configured = [s for s in slots.values() if s["status"] != "placeholder"]
        if configured and all(s["status"] != "ok" for s in configured):
            checks["status"] = "degraded"

    hub = getattr(request.app.state, "hub", None)
    if hub is not None:
        checks["components"]["realtime"] = {
            "status": "ok",
            "subscribers": hub.subscriber_count,
        }

    return checks


async def _check_slots(slots: tuple[ProviderSlot, ...]) -> dict[str, dict[str, str]]:
    """Probe every configured analysis provider concurrently."""

    async def _one(slot: ProviderSlot) -> dict[str, str]:
        if slot.provider is None:
            return {"status": "placeholder"}
        try:
            healthy = await slot.provider.health_check()
        except Exception:
            return {"status": "error"}
        return {"status": "ok" if healthy else "unhealthy"}

    results = await asyncio.gather(*(_one(slot) for slot in slots))
    return {slot.key: result for slot, result in zip(slots, results, strict=True)}
