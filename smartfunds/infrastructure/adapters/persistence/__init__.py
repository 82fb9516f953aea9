"""Persistence adapters (relational storage)."""

from smartfunds.infrastructure.adapters.persistence.sql_mission_store import (
    SqlMissionStore,
)

__all__: list[str] = ["SqlMissionStore"]
