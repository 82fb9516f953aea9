"""Database engine bootstrap (SQLAlchemy async).

The engine is created once by the composition root and handed to the
store by reference; nothing here caches engines by URL.

Usage:
    from smartfunds.bootstrap.database import create_database_engine

    engine = create_database_engine(config)
    store = SqlMissionStore(engine)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from structlog import get_logger

from smartfunds.config.mission_config import MissionEngineConfig, mask_database_url

logger = get_logger()


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Open every SQLite transaction with BEGIN IMMEDIATE.

    The write lock is held from the first read of a transaction, not from
    its first write.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _is_in_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def create_database_engine(config: MissionEngineConfig) -> AsyncEngine:
    """Create the async engine for the configured database.

    In-memory SQLite databases exist per connection, so they get a single
    shared connection (StaticPool) to keep one database for the engine's
    lifetime. SQLite transactions start with BEGIN IMMEDIATE.

    Args:
        config: Mission engine configuration.

    Returns:
        A new AsyncEngine. The caller owns it and must dispose it.
    """
    log = logger.bind(component="database_bootstrap")
    url = config.database_url
    log.info("creating_database_engine", url=mask_database_url(url))

    if _is_in_memory_sqlite(url):
        engine = create_async_engine(url, echo=config.sql_echo, poolclass=StaticPool)
    else:
        engine = create_async_engine(
            url,
            echo=config.sql_echo,
            pool_pre_ping=True,  # Enable connection health checks
        )

    if engine.dialect.name == "sqlite":
        _use_immediate_transactions(engine)
    return engine
