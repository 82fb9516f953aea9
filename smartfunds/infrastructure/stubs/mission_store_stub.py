"""Mission store stub implementation.

This module provides an in-memory implementation of MissionStoreProtocol
for development and testing purposes.

Transactions are simulated with an asyncio.Lock (the in-memory equivalent
of a row lock held for the whole transaction) and a snapshot that is
restored if the transaction fails, so a mission write and its audit entry
are either both visible or neither is.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import replace
from datetime import datetime

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.domain.errors.mission import (
    MissionAlreadyExistsError,
    MissionNotFoundError,
)
from smartfunds.domain.models.mission import AuditLogEntry, Mission, MissionStatus


class MissionStoreStub(MissionStoreProtocol):
    """In-memory stub implementation of MissionStoreProtocol.

    NOT suitable for production use: state lives only as long as the
    instance.

    Attributes:
        _missions: Mapping of mission id to Mission.
        _audit_log: Audit entries in append order.
        _lock: Serializes transactions and standalone writes.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._missions: dict[str, Mission] = {}
        self._audit_log: list[AuditLogEntry] = []
        self._lock = asyncio.Lock()
        self._in_transaction: ContextVar[bool] = ContextVar(
            f"mission_store_stub_tx_{id(self)}", default=False
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Apply the enclosed writes atomically.

        A transaction opened inside another one joins the outer one.
        """
        if self._in_transaction.get():
            yield
            return

        async with self._lock:
            missions_snapshot = dict(self._missions)
            audit_snapshot = list(self._audit_log)
            token = self._in_transaction.set(True)
            try:
                yield
            except BaseException:
                self._missions = missions_snapshot
                self._audit_log = audit_snapshot
                raise
            finally:
                self._in_transaction.reset(token)

    async def get_mission_by_id(self, mission_id: str) -> Mission | None:
        """Retrieve a mission by id.

        Args:
            mission_id: The mission identifier.

        Returns:
            The mission if found, None otherwise.
        """
        return self._missions.get(mission_id)

    async def insert_mission(self, mission: Mission) -> None:
        """Store a new mission.

        Raises:
            MissionAlreadyExistsError: If mission.id already exists.
        """
        async with self.transaction():
            if mission.id in self._missions:
                raise MissionAlreadyExistsError(mission.id)
            self._missions[mission.id] = mission

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
        async with self.transaction():
            mission = self._missions.get(mission_id)
            if mission is None:
                raise MissionNotFoundError(mission_id)
            self._missions[mission_id] = replace(
                mission, status=status, updated_at=updated_at
            )

    async def append_audit_entry(self, entry: AuditLogEntry) -> None:
        """Append one entry to the audit log."""
        async with self.transaction():
            self._audit_log.append(entry)

    async def list_audit_entries(self, mission_id: str) -> list[AuditLogEntry]:
        """List a mission's entries ordered by (timestamp, id)."""
        entries = [e for e in self._audit_log if e.mission_id == mission_id]
        entries.sort(key=lambda e: (e.timestamp, e.id))
        return entries

    async def list_missions(self) -> list[Mission]:
        """List all missions ordered by (created_at, id)."""
        return sorted(self._missions.values(), key=lambda m: (m.created_at, m.id))

    # Test helpers

    def clear(self) -> None:
        """Clear all stored data (for testing)."""
        self._missions.clear()
        self._audit_log.clear()

    def get_mission_count(self) -> int:
        """Get the number of stored missions."""
        return len(self._missions)

    def get_audit_entry_count(self) -> int:
        """Get the number of stored audit entries across all missions."""
        return len(self._audit_log)
