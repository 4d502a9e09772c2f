"""Alembic environment for the truthvote schema.

The database URL comes from, in order: ``alembic -x url=...``, the
truthvote configuration (``database.url``), then ``alembic.ini``.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from truthvote.config.loader import load_config
from truthvote.core.errors import ConfigError
from truthvote.memory.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _database_url() -> str:
    explicit = context.get_x_argument(as_dictionary=True).get("url")
    if explicit:
        url = explicit
    else:
        try:
            url = load_config().database.url
        except ConfigError:
            url = config.get_main_option("sqlalchemy.url") or ""
    if ":///" in url:
        prefix, path = url.split(":///", 1)
        url = prefix + ":///" + os.path.expanduser(path)
        if url.startswith("sqlite") and path and path != ":memory:":
            os.makedirs(os.path.dirname(os.path.expanduser(path)), exist_ok=True)
    return url


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations against the async engine the app uses."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    connectable = async_engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
