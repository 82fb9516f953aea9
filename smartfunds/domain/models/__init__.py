"""Domain models for the mission engine."""

from smartfunds.domain.models.mission import (
    ALLOWED_TRANSITIONS,
    INITIAL_STATUS,
    TERMINAL_STATUSES,
    AuditLogEntry,
    ExemptionType,
    Mission,
    MissionCreateRequest,
    MissionStatus,
    is_legal_walk,
    is_valid_transition,
    parse_status,
)

__all__: list[str] = [
    "ALLOWED_TRANSITIONS",
    "INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "AuditLogEntry",
    "ExemptionType",
    "Mission",
    "MissionCreateRequest",
    "MissionStatus",
    "is_legal_walk",
    "is_valid_transition",
    "parse_status",
]
