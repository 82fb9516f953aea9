"""Relational implementation of MissionStoreProtocol (SQLAlchemy async).

Missions and their audit ledger live in two tables:

    missions(id, offering_name, asset_type, exemption_type, target_raise,
             jurisdiction, status, created_at, updated_at)
    audit_log(id, mission_id, from_status, to_status, actor, timestamp, metadata)

Timestamps are stored as fixed-width ISO-8601 text
(``2026-01-01T00:00:00.000Z``) so ORDER BY on the text column is time
order. Audit metadata is stored as JSON text, NULL when absent.

The store is constructed once around an AsyncEngine and passed by
reference; there is no module-level registry of open databases.

Usage:
    engine = create_async_engine("sqlite+aiosqlite:///./smartfunds.db")
    store = SqlMissionStore(engine)
    await store.create_schema()

    async with store.transaction():
        await store.insert_mission(mission)
        await store.append_audit_entry(entry)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from structlog import get_logger

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.domain.errors.mission import (
    MissionAlreadyExistsError,
    MissionNotFoundError,
)
from smartfunds.domain.models.mission import (
    AuditLogEntry,
    ExemptionType,
    Mission,
    MissionStatus,
    format_timestamp,
    parse_timestamp,
)

logger = get_logger()

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS missions (
        id TEXT PRIMARY KEY,
        offering_name TEXT NOT NULL,
        asset_type TEXT NOT NULL,
        exemption_type TEXT NOT NULL CHECK (exemption_type = '506C'),
        target_raise REAL NOT NULL,
        jurisdiction TEXT NOT NULL,
        status TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id TEXT PRIMARY KEY,
        mission_id TEXT NOT NULL,
        from_status TEXT,
        to_status TEXT NOT NULL,
        actor TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        metadata TEXT
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_audit_log_mission_order
        ON audit_log (mission_id, timestamp, id)
    """,
)

_MISSION_COLUMNS = (
    "id, offering_name, asset_type, exemption_type, target_raise, "
    "jurisdiction, status, created_at, updated_at"
)
_AUDIT_COLUMNS = "id, mission_id, from_status, to_status, actor, timestamp, metadata"


def _row_to_mission(row: Mapping[str, Any]) -> Mission:
    return Mission(
        id=row["id"],
        offering_name=row["offering_name"],
        asset_type=row["asset_type"],
        exemption_type=ExemptionType(row["exemption_type"]),
        target_raise=float(row["target_raise"]),
        jurisdiction=row["jurisdiction"],
        status=MissionStatus(row["status"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def _row_to_audit_entry(row: Mapping[str, Any]) -> AuditLogEntry:
    from_status = row["from_status"]
    metadata = row["metadata"]
    return AuditLogEntry(
        id=row["id"],
        mission_id=row["mission_id"],
        from_status=MissionStatus(from_status) if from_status is not None else None,
        to_status=MissionStatus(row["to_status"]),
        actor=row["actor"],
        timestamp=parse_timestamp(row["timestamp"]),
        metadata=json.loads(metadata) if metadata is not None else None,
    )


class SqlMissionStore(MissionStoreProtocol):
    """MissionStoreProtocol over a SQLAlchemy AsyncEngine.

    Every call outside transaction() runs in its own short transaction.
    Calls inside transaction() share one connection and commit together;
    an exception rolls all of them back.

    A transition reads the current status and writes the next one, so two
    transactions on the same mission must not overlap:
    - PostgreSQL: reads of a mission inside a transaction take a row lock
      (SELECT ... FOR UPDATE).
    - SQLite: transactions on one store are serialized by an asyncio.Lock,
      and create_database_engine opens every transaction with
      BEGIN IMMEDIATE so writers in other processes wait for the lock.

    Attributes:
        _engine: The async engine.
        _connection: Connection of the transaction open in the current context.
        _lock: Serializes transactions on dialects without row locks.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the store.

        Args:
            engine: SQLAlchemy async engine, owned by the caller.
        """
        self._engine = engine
        self._connection: ContextVar[AsyncConnection | None] = ContextVar(
            f"sql_mission_store_connection_{id(self)}", default=None
        )
        self._lock = asyncio.Lock()
        self._log = logger.bind(component="sql_mission_store")

    async def create_schema(self) -> None:
        """Create the missions and audit_log tables if they do not exist."""
        async with self._engine.begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(text(statement))
        self._log.info("mission_schema_ready", dialect=self._engine.dialect.name)

    @property
    def _has_row_locks(self) -> bool:
        return self._engine.dialect.name == "postgresql"

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed calls in one database transaction.

        A transaction opened inside another one joins the outer one.
        """
        if self._connection.get() is not None:
            yield
            return

        if self._has_row_locks:
            async with self._begin():
                yield
        else:
            async with self._lock, self._begin():
                yield

    @asynccontextmanager
    async def _begin(self) -> AsyncIterator[None]:
        async with self._engine.begin() as conn:
            token = self._connection.set(conn)
            try:
                yield
            finally:
                self._connection.reset(token)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[AsyncConnection]:
        conn = self._connection.get()
        if conn is not None:
            yield conn
            return
        if self._has_row_locks:
            async with self._engine.begin() as conn:
                yield conn
        else:
            async with self._lock, self._engine.begin() as conn:
                yield conn

    def _row_lock_clause(self) -> str:
        if self._connection.get() is not None and self._has_row_locks:
            return " FOR UPDATE"
        return ""

    async def get_mission_by_id(self, mission_id: str) -> Mission | None:
        """Retrieve a mission by id.

        Args:
            mission_id: The mission identifier.

        Returns:
            The mission if found, None otherwise.
        """
        async with self._connect() as conn:
            result = await conn.execute(
                text(
                    f"SELECT {_MISSION_COLUMNS} FROM missions WHERE id = :id"
                    f"{self._row_lock_clause()}"
                ),
                {"id": mission_id},
            )
            row = result.mappings().first()
        return _row_to_mission(row) if row is not None else None

    async def insert_mission(self, mission: Mission) -> None:
        """Store a new mission.

        Raises:
            MissionAlreadyExistsError: If mission.id already exists.
        """
        try:
            async with self._connect() as conn:
                await conn.execute(
                    text(
                        f"INSERT INTO missions ({_MISSION_COLUMNS}) VALUES ("
                        ":id, :offering_name, :asset_type, :exemption_type, "
                        ":target_raise, :jurisdiction, :status, :created_at, :updated_at)"
                    ),
                    {
                        "id": mission.id,
                        "offering_name": mission.offering_name,
                        "asset_type": mission.asset_type,
                        "exemption_type": mission.exemption_type.value,
                        "target_raise": mission.target_raise,
                        "jurisdiction": mission.jurisdiction,
                        "status": mission.status.value,
                        "created_at": format_timestamp(mission.created_at),
                        "updated_at": format_timestamp(mission.updated_at),
                    },
                )
        except IntegrityError as e:
            raise MissionAlreadyExistsError(mission.id) from e

    async def update_mission_status(
        self,
        mission_id: str,
        status: MissionStatus,
        updated_at: datetime,
    ) -> None:
        """Set a mission's status and update timestamp.

        Raises:
            MissionNotFoundError: If the mission doesn't exist.
        """
        async with self._connect() as conn:
            result = await conn.execute(
                text(
                    "UPDATE missions SET status = :status, updated_at = :updated_at "
                    "WHERE id = :id"
                ),
                {
                    "id": mission_id,
                    "status": status.value,
                    "updated_at": format_timestamp(updated_at),
                },
            )
            if result.rowcount == 0:
                raise MissionNotFoundError(mission_id)

    async def append_audit_entry(self, entry: AuditLogEntry) -> None:
        """Append one entry to the audit log."""
        async with self._connect() as conn:
            await conn.execute(
                text(
                    f"INSERT INTO audit_log ({_AUDIT_COLUMNS}) VALUES ("
                    ":id, :mission_id, :from_status, :to_status, :actor, "
                    ":timestamp, :metadata)"
                ),
                {
                    "id": entry.id,
                    "mission_id": entry.mission_id,
                    "from_status": entry.from_status.value if entry.from_status else None,
                    "to_status": entry.to_status.value,
                    "actor": entry.actor,
                    "timestamp": format_timestamp(entry.timestamp),
                    "metadata": (
                        json.dumps(dict(entry.metadata))
                        if entry.metadata is not None
                        else None
                    ),
                },
            )

    async def list_audit_entries(self, mission_id: str) -> list[AuditLogEntry]:
        """List a mission's entries ordered by (timestamp, id)."""
        async with self._connect() as conn:
            result = await conn.execute(
                text(
                    f"SELECT {_AUDIT_COLUMNS} FROM audit_log "
                    "WHERE mission_id = :mission_id ORDER BY timestamp ASC, id ASC"
                ),
                {"mission_id": mission_id},
            )
            rows = result.mappings().all()
        return [_row_to_audit_entry(row) for row in rows]

    async def list_missions(self) -> list[Mission]:
        """List all missions ordered by (created_at, id)."""
        async with self._connect() as conn:
            result = await conn.execute(
                text(
                    f"SELECT {_MISSION_COLUMNS} FROM missions "
                    "ORDER BY created_at ASC, id ASC"
                )
            )
            rows = result.mappings().all()
        return [_row_to_mission(row) for row in rows]
