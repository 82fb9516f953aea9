"""Infrastructure adapters for the mission engine.

Adapters implement the ports defined in the application layer,
providing concrete implementations for external services.
"""

from smartfunds.infrastructure.adapters.persistence import SqlMissionStore

__all__: list[str] = ["SqlMissionStore"]
