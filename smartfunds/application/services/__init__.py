"""Application services for the mission engine."""

from smartfunds.application.services.audit_ledger import AuditLedger
from smartfunds.application.services.lifecycle_engine import LifecycleEngine
from smartfunds.application.services.mission_clock import MissionClock
from smartfunds.application.services.mission_repository import MissionRepository
from smartfunds.application.services.time_authority_service import SystemTimeAuthority

__all__: list[str] = [
    "AuditLedger",
    "LifecycleEngine",
    "MissionClock",
    "MissionRepository",
    "SystemTimeAuthority",
]
