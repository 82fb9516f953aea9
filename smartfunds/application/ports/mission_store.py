"""Mission store port - the storage collaborator of the mission engine.

This module defines the abstract interface for persisting missions and
their audit ledger. The engine only requires "read one row by key",
"append one row" and "list rows in ledger order"; how those map onto a
relational store is the adapter's concern.

Developer Golden Rules:
1. NO BUSINESS LOGIC - The store never consults the transition table
2. FAIL LOUD - Stores raise on integrity errors, never skip a write
3. ATOMIC PAIRS - Writes made inside transaction() commit together or not at all
4. SERIALIZED WRITERS - Concurrent transactions on one store do not interleave
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from smartfunds.domain.models.mission import AuditLogEntry, Mission, MissionStatus


class MissionStoreProtocol(Protocol):
    """Protocol for mission and audit ledger persistence.

    Implementations may use a relational database, in-memory storage, or
    other backends.

    Methods:
        get_mission_by_id: Retrieve one mission
        insert_mission: Store a new mission
        update_mission_status: Set a mission's status and updated_at
        append_audit_entry: Append one ledger entry
        list_audit_entries: Ledger entries of a mission in (timestamp, id) order
        list_missions: All missions in (created_at, id) order
        transaction: Scope in which writes are applied atomically
    """

    async def get_mission_by_id(self, mission_id: str) -> Mission | None:
        """Retrieve a mission by id.

        Args:
            mission_id: The mission identifier.

        Returns:
            The mission if found, None otherwise.
        """
        ...

    async def insert_mission(self, mission: Mission) -> None:
        """Store a new mission.

        Args:
            mission: The mission to store.

        Raises:
            MissionAlreadyExistsError: If mission.id is already stored.
        """
        ...

    async def update_mission_status(
        self,
        mission_id: str,
        status: MissionStatus,
        updated_at: datetime,
    ) -> None:
        """Set a mission's status and update timestamp.

        Args:
            mission_id: The mission to update.
            status: The new status.
            updated_at: Timestamp of the transition.

        Raises:
            MissionNotFoundError: If the mission doesn't exist.
        """
        ...

    async def append_audit_entry(self, entry: AuditLogEntry) -> None:
        """Append one entry to the audit ledger.

        Args:
            entry: The entry to append. Entries are never updated or deleted.
        """
        ...

    async def list_audit_entries(self, mission_id: str) -> Sequence[AuditLogEntry]:
        """List a mission's ledger entries ordered by (timestamp, id).

        Args:
            mission_id: The mission whose entries to list.

        Returns:
            Entries in ledger order; empty if there are none.
        """
        ...

    async def list_missions(self) -> Sequence[Mission]:
        """List all missions ordered by (created_at, id)."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open a scope whose writes are applied atomically.

        Reads and writes issued inside the scope observe each other. If the
        scope exits with an exception, none of its writes are observable.

        Usage:
            async with store.transaction():
                await store.insert_mission(mission)
                await store.append_audit_entry(entry)
        """
        ...
