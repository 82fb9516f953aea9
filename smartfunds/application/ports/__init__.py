"""Ports (interfaces) the application layer depends on.

Adapters in smartfunds/infrastructure implement these.
"""

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = ["MissionStoreProtocol", "TimeAuthorityProtocol"]
