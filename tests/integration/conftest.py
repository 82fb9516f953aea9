"""
Integration test configuration.

Integration tests run the SQL mission store against a real SQLite
database file (aiosqlite driver) created per test under tmp_path.

Usage:
    @pytest.mark.integration
    async def test_example(sql_store: SqlMissionStore) -> None:
        ...
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from smartfunds.bootstrap.database import create_database_engine
from smartfunds.config import MissionEngineConfig
from smartfunds.infrastructure.adapters.persistence import SqlMissionStore


@pytest.fixture
def sqlite_config(tmp_path: Path) -> MissionEngineConfig:
    """Config pointing at a fresh SQLite file."""
    return MissionEngineConfig(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'missions.db'}",
        storage="sql",
        environment="development",
    )


@pytest.fixture
async def database_engine(sqlite_config: MissionEngineConfig) -> AsyncIterator[AsyncEngine]:
    """Async engine for the test database, disposed after the test."""
    engine = create_database_engine(sqlite_config)
    yield engine
    await engine.dispose()


@pytest.fixture
async def sql_store(database_engine: AsyncEngine) -> SqlMissionStore:
    """SQL mission store with the schema created."""
    store = SqlMissionStore(database_engine)
    await store.create_schema()
    return store
