"""Infrastructure stubs for development and testing.

Available stubs:
- MissionStoreStub: In-memory MissionStoreProtocol with lock-and-snapshot transactions

WARNING: These stubs are NOT for production use.
Production implementations are in smartfunds/infrastructure/adapters/.
"""

from smartfunds.infrastructure.stubs.mission_store_stub import MissionStoreStub

__all__: list[str] = ["MissionStoreStub"]
