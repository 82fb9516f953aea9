"""Mission repository - mission record access over the storage collaborator.

The repository is passive: it holds no business logic and never consults
the transition table. The lifecycle engine is its only writer.
"""

from __future__ import annotations

from datetime import datetime

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.domain.models.mission import Mission, MissionStatus


class MissionRepository:
    """Reads and writes mission records through a MissionStoreProtocol.

    Attributes:
        _store: The storage collaborator, shared with the audit ledger.
    """

    def __init__(self, store: MissionStoreProtocol) -> None:
        self._store = store

    async def get(self, mission_id: str) -> Mission | None:
        """Return the mission with this id, or None if absent."""
        return await self._store.get_mission_by_id(mission_id)

    async def add(self, mission: Mission) -> None:
        """Persist a newly created mission."""
        await self._store.insert_mission(mission)

    async def update_status(
        self,
        mission_id: str,
        status: MissionStatus,
        updated_at: datetime,
    ) -> None:
        """Persist a status change."""
        await self._store.update_mission_status(mission_id, status, updated_at)

    async def list(self) -> list[Mission]:
        """Return all missions ordered by (created_at, id)."""
        return list(await self._store.list_missions())
