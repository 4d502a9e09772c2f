"""FastAPI application factory for the truthvote API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from truthvote.analysis.checker import FactChecker
    from truthvote.config.schema import TruthVoteConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Set up DB, change hub and fact checker on startup; tear down on shutdown."""
    from truthvote.cli.app import _create_db, _setup_fact_checker
    from truthvote.realtime.hub import ChangeHub
    from truthvote.service import FeedService

    config: TruthVoteConfig = app.state.config
    factory, engine = await _create_db(config)
    hub = ChangeHub()

    app.state.db_factory = factory
    app.state.engine = engine
    app.state.hub = hub
    app.state.feed_service = FeedService(factory, hub)
    if getattr(app.state, "fact_checker", None) is None:
        app.state.fact_checker = _setup_fact_checker(config)

    logger.info("truthvote API started (database: %s)", engine.url.drivername)
    yield

    hub.close_all()
    await engine.dispose()


def create_app(
    config: TruthVoteConfig | None = None,
    *,
    fact_checker: FactChecker | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    from truthvote import __version__
    from truthvote.config.loader import load_config
    from truthvote.core.log import configure_logging

    if config is None:
        config = load_config()
    configure_logging(config.logging)

    app = FastAPI(
        title="truthvote",
        description="Community fact-checking with AI-assisted verdicts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.fact_checker = fact_checker

    from fastapi.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from truthvote.api.health import router as health_router
    from truthvote.api.routes.analysis import router as analysis_router
    from truthvote.api.routes.posts import router as posts_router
    from truthvote.api.routes.users import router as users_router
    from truthvote.api.routes.votes import router as votes_router
    from truthvote.api.routes.ws import router as ws_router

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(votes_router)
    app.include_router(analysis_router)
    app.include_router(ws_router)

    return app
