"""Mission engine composition root.

Builds the one MissionClock, the one storage collaborator and the
LifecycleEngine that uses them, so every entry point shares the same clock
and store by reference.

Usage:
    container = await build_mission_engine(MissionEngineConfig.from_environment())
    mission = await container.engine.create(request, actor="operator")
    ...
    await container.close()
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine
from structlog import get_logger

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.application.ports.time_authority import TimeAuthorityProtocol
from smartfunds.application.services.lifecycle_engine import LifecycleEngine
from smartfunds.application.services.mission_clock import MissionClock
from smartfunds.application.services.time_authority_service import SystemTimeAuthority
from smartfunds.bootstrap.database import create_database_engine
from smartfunds.config.mission_config import MissionEngineConfig
from smartfunds.infrastructure.adapters.persistence import SqlMissionStore
from smartfunds.infrastructure.stubs import MissionStoreStub

logger = get_logger()


@dataclass
class MissionEngineContainer:
    """Wired mission engine components.

    Attributes:
        engine: The lifecycle engine.
        store: Storage collaborator shared by the engine's repository and ledger.
        clock: The mission clock.
        database_engine: SQLAlchemy engine when storage is "sql", else None.
    """

    engine: LifecycleEngine
    store: MissionStoreProtocol
    clock: MissionClock
    database_engine: AsyncEngine | None = None

    async def close(self) -> None:
        """Dispose the database engine, if any."""
        if self.database_engine is not None:
            await self.database_engine.dispose()
            self.database_engine = None


async def build_mission_engine(
    config: MissionEngineConfig,
    time_authority: TimeAuthorityProtocol | None = None,
) -> MissionEngineContainer:
    """Build the mission engine for a configuration.

    Args:
        config: Mission engine configuration.
        time_authority: Wall-clock source. Defaults to SystemTimeAuthority.

    Returns:
        MissionEngineContainer with schema created for SQL storage.
    """
    clock = MissionClock(time_authority or SystemTimeAuthority())
    database_engine: AsyncEngine | None = None

    store: MissionStoreProtocol
    if config.storage == "memory":
        store = MissionStoreStub()
    else:
        database_engine = create_database_engine(config)
        sql_store = SqlMissionStore(database_engine)
        await sql_store.create_schema()
        store = sql_store

    logger.info("mission_engine_ready", storage=config.storage)
    return MissionEngineContainer(
        engine=LifecycleEngine(store=store, clock=clock),
        store=store,
        clock=clock,
        database_engine=database_engine,
    )
