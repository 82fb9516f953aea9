"""Audit ledger - append-only log of mission lifecycle events.

Entries are created exactly once per creation or transition event and are
never mutated or deleted; this class has no update path.
For one mission, entries ordered by (timestamp, id) reconstruct one legal
walk of the transition table starting at INTAKE.
"""

from __future__ import annotations

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.domain.models.mission import AuditLogEntry, MissionStatus


class AuditLedger:
    """Append-only access to the audit log through a MissionStoreProtocol.

    Attributes:
        _store: The storage collaborator, shared with the mission repository.
    """

    def __init__(self, store: MissionStoreProtocol) -> None:
        self._store = store

    async def append(self, entry: AuditLogEntry) -> None:
        """Append one entry to the ledger."""
        await self._store.append_audit_entry(entry)

    async def entries_for(self, mission_id: str) -> list[AuditLogEntry]:
        """Return a mission's entries ordered by timestamp, then id.

        Ordering does not depend on the storage backend.
        """
        entries = await self._store.list_audit_entries(mission_id)
        return sorted(entries, key=lambda entry: (entry.timestamp, entry.id))

    async def status_walk(self, mission_id: str) -> list[MissionStatus]:
        """Return the statuses a mission has passed through, in order."""
        return [entry.to_status for entry in await self.entries_for(mission_id)]
