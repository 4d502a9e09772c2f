"""Shared test fixtures for truthvote."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from truthvote.config.schema import TruthVoteConfig
from truthvote.memory.models import Base
from truthvote.providers.base import ModelInfo, TokenUsage
from truthvote.realtime.hub import ChangeHub
from truthvote.service import FeedService

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


def _memory_engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@pytest.fixture
async def db_factory() -> async_sessionmaker[AsyncSession]:  # type: ignore[misc]
    """Session factory over a fresh in-memory SQLite DB with FK enforcement."""
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(
    db_factory: async_sessionmaker[AsyncSession],
) -> AsyncSession:  # type: ignore[misc]
    async with db_factory() as session:
        yield session


@pytest.fixture
def hub() -> ChangeHub:
    return ChangeHub()


@pytest.fixture
def service(
    db_factory: async_sessionmaker[AsyncSession], hub: ChangeHub
) -> FeedService:
    return FeedService(db_factory, hub)


@pytest.fixture
def test_config() -> TruthVoteConfig:
    """In-memory DB, no provider keys, no web lookup."""
    return TruthVoteConfig.model_validate(
        {
            "database": {"url": "sqlite+aiosqlite:///:memory:"},
            "analysis": {"web_context": {"enabled": False}},
            "logging": {"level": "WARNING"},
        }
    )


@pytest.fixture
def make_model_info() -> Any:
    """Factory fixture for ModelInfo with sensible defaults."""

    def _make(**overrides: Any) -> ModelInfo:
        defaults: dict[str, Any] = {
            "provider_id": "test",
            "model_id": "test-model",
            "display_name": "Test Model",
            "context_window": 128_000,
            "max_output_tokens": 4096,
            "input_cost_per_mtok": 3.0,
            "output_cost_per_mtok": 15.0,
        }
        defaults.update(overrides)
        return ModelInfo(**defaults)

    return _make


@pytest.fixture
def make_usage() -> Any:
    """Factory fixture for TokenUsage with sensible defaults."""

    def _make(**overrides: Any) -> TokenUsage:
        defaults: dict[str, Any] = {"input_tokens": 100, "output_tokens": 50}
        defaults.update(overrides)
        return TokenUsage(**defaults)

    return _make
