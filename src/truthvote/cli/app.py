"""Command-line entry point: ``truthvote serve``.

Also hosts the engine/provider bootstrap helpers shared with the API
lifespan.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from truthvote import __version__
from truthvote.config.loader import load_config
from truthvote.core.errors import ConfigError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from truthvote.analysis.checker import FactChecker
    from truthvote.config.schema import TruthVoteConfig
    from truthvote.providers.base import ModelProvider

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(
    config_path: str | None, overrides: dict[str, Any] | None = None
) -> TruthVoteConfig:
    """Load config with user-friendly error handling."""
    try:
        return load_config(path=config_path, overrides=overrides)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


async def _create_db(
    config: TruthVoteConfig,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create async engine and sessionmaker from config."""
    from sqlalchemy import event
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from truthvote.memory.models import Base

    url = config.database.url
    if "~" in url:
        url = url.replace("~", str(Path.home()))

    if url.startswith("sqlite"):
        db_path = url.split("///")[-1] if "///" in url else ""
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    is_memory = url.startswith("sqlite") and (":memory:" in url or "///" not in url)

    engine_kwargs: dict[str, object] = {}
    if url.startswith("sqlite"):
        if is_memory:
            # In-memory SQLite needs StaticPool so all queries share
            # the same connection (and thus the same in-memory DB).
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            from sqlalchemy.pool import NullPool

            engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = config.database.pool_size
        engine_kwargs["max_overflow"] = config.database.max_overflow
        engine_kwargs["pool_timeout"] = config.database.pool_timeout
        engine_kwargs["pool_recycle"] = config.database.pool_recycle
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    # Cascading vote deletes rely on SQLite enforcing foreign keys.
    if url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    # In-memory SQLite is created on the fly; anything persistent is
    # managed by alembic migrations.
    if is_memory:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    return factory, engine


def _setup_providers(config: TruthVoteConfig) -> dict[str, ModelProvider | None]:
    """Instantiate the configured providers; unconfigured ones map to None."""
    providers: dict[str, ModelProvider | None] = {"openai": None, "google": None}

    for name, prov_config in config.providers.items():
        if not prov_config.enabled:
            continue
        if prov_config.api_key is None:
            logger.info("Provider %s has no API key; using placeholders", name)
            continue

        if name == "openai":
            from truthvote.providers.openai import OpenAIProvider

            providers[name] = OpenAIProvider(
                api_key=prov_config.api_key,
                base_url=prov_config.base_url,
            )
        elif name == "google":
            from truthvote.providers.google import GoogleProvider

            providers[name] = GoogleProvider(api_key=prov_config.api_key)
        else:
            logger.warning("Unknown provider in config: %s", name)

    return providers


def _setup_fact_checker(config: TruthVoteConfig) -> FactChecker:
    """Build the OpenAI + Gemini checker from config."""
    from truthvote.analysis.checker import build_fact_checker

    openai_cfg = config.providers.get("openai")
    google_cfg = config.providers.get("google")
    return build_fact_checker(
        _setup_providers(config),
        config.analysis,
        openai_model=(openai_cfg and openai_cfg.default_model) or "gpt-4o",
        gemini_model=(google_cfg and google_cfg.default_model) or "gemini-2.5-pro",
        openai_label=(openai_cfg and openai_cfg.display_name) or "OpenAI",
        gemini_label=(google_cfg and google_cfg.display_name) or "Gemini",
    )


# ── CLI ──────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="truthvote")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """truthvote: community fact-checking with AI-assisted verdicts."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
@click.option(
    "--reload", is_flag=True, default=False, help="Enable auto-reload for development."
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST + WebSocket API server."""
    import uvicorn

    from truthvote.api.app import create_app

    config_path = ctx.obj["config_path"]
    bind = {"host": host, "port": port}
    overrides = {"api": {k: v for k, v in bind.items() if v is not None}}
    config = _load_config(config_path, overrides)

    click.echo(f"Serving on http://{config.api.host}:{config.api.port}")

    if reload:
        # The reloader imports the app in a child process, which finds the
        # config file through the environment.
        if config_path is not None:
            os.environ["TRUTHVOTE_CONFIG"] = str(Path(config_path).resolve())
        uvicorn.run(
            "truthvote.api.app:create_app",
            factory=True,
            host=config.api.host,
            port=config.api.port,
            reload=True,
        )
        return

    uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)
