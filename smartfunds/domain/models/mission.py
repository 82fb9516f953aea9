"""Mission domain model and lifecycle transition table.

A mission is a regulated fundraising offering tracked through a fixed
compliance lifecycle. The mission's ``status`` field is the state of the
lifecycle state machine; INTAKE is the only initial status and ARCHIVED the
only terminal one.

State Machine:
    INTAKE -> LEGAL_STRUCTURING -> COMPOSITION -> IMPLEMENTATION -> PR_GATE
    -> VERIFICATION -> HUMAN_CHECKPOINT -> APPROVED -> LAUNCHED -> ARCHIVED

    Rejection loops:
        VERIFICATION -> IMPLEMENTATION
        HUMAN_CHECKPOINT -> IMPLEMENTATION

    There are no self-loops and no shortcut edges: every forward path
    visits every intermediate status in order.

Timestamps are timezone-aware UTC datetimes with millisecond precision and
serialize as ``2026-01-01T00:00:00.000Z``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from smartfunds.domain.errors.mission import MissionValidationError


class ExemptionType(Enum):
    """Regulatory exemption an offering is raised under.

    Only Reg D Rule 506(c) is supported; every mission carries it.
    """

    C506 = "506C"


class MissionStatus(Enum):
    """Status in the mission lifecycle.

    States:
        INTAKE: Initial status after creation
        LEGAL_STRUCTURING: Offering structure under legal review
        COMPOSITION: Offering documents being composed
        IMPLEMENTATION: Work in progress (target of rejection loops)
        PR_GATE: Change review gate
        VERIFICATION: Automated verification of the implementation
        HUMAN_CHECKPOINT: Human sign-off
        APPROVED: Cleared for launch
        LAUNCHED: Offering is live
        ARCHIVED: Closed out (terminal)
    """

    INTAKE = "INTAKE"
    LEGAL_STRUCTURING = "LEGAL_STRUCTURING"
    COMPOSITION = "COMPOSITION"
    IMPLEMENTATION = "IMPLEMENTATION"
    PR_GATE = "PR_GATE"
    VERIFICATION = "VERIFICATION"
    HUMAN_CHECKPOINT = "HUMAN_CHECKPOINT"
    APPROVED = "APPROVED"
    LAUNCHED = "LAUNCHED"
    ARCHIVED = "ARCHIVED"

    def is_terminal(self) -> bool:
        """Check if no transition leaves this status."""
        return self in TERMINAL_STATUSES

    def valid_transitions(self) -> frozenset[MissionStatus]:
        """Get the statuses directly reachable from this one.

        Returns:
            Frozenset of target statuses. Empty for the terminal status.
        """
        return ALLOWED_TRANSITIONS[self]


INITIAL_STATUS: MissionStatus = MissionStatus.INTAKE

TERMINAL_STATUSES: frozenset[MissionStatus] = frozenset({MissionStatus.ARCHIVED})

# Maps each status to the statuses directly reachable from it.
# Every status appears as a key; the terminal status maps to an empty set.
ALLOWED_TRANSITIONS: dict[MissionStatus, frozenset[MissionStatus]] = {
    MissionStatus.INTAKE: frozenset({MissionStatus.LEGAL_STRUCTURING}),
    MissionStatus.LEGAL_STRUCTURING: frozenset({MissionStatus.COMPOSITION}),
    MissionStatus.COMPOSITION: frozenset({MissionStatus.IMPLEMENTATION}),
    MissionStatus.IMPLEMENTATION: frozenset({MissionStatus.PR_GATE}),
    MissionStatus.PR_GATE: frozenset({MissionStatus.VERIFICATION}),
    # Rejection loop back to IMPLEMENTATION
    MissionStatus.VERIFICATION: frozenset(
        {MissionStatus.HUMAN_CHECKPOINT, MissionStatus.IMPLEMENTATION}
    ),
    # Rejection loop back to IMPLEMENTATION
    MissionStatus.HUMAN_CHECKPOINT: frozenset(
        {MissionStatus.APPROVED, MissionStatus.IMPLEMENTATION}
    ),
    MissionStatus.APPROVED: frozenset({MissionStatus.LAUNCHED}),
    MissionStatus.LAUNCHED: frozenset({MissionStatus.ARCHIVED}),
    MissionStatus.ARCHIVED: frozenset(),
}


def is_valid_transition(from_status: object, to_status: object) -> bool:
    """Check whether ``from_status -> to_status`` is an edge of the table.

    Values that are not MissionStatus members are never valid.

    Args:
        from_status: Current status.
        to_status: Requested status.

    Returns:
        True if the edge exists, False otherwise.
    """
    if not isinstance(from_status, MissionStatus) or not isinstance(
        to_status, MissionStatus
    ):
        return False
    return to_status in ALLOWED_TRANSITIONS[from_status]


def is_legal_walk(statuses: Sequence[MissionStatus]) -> bool:
    """Check that a status sequence is a walk of the table starting at INTAKE.

    Args:
        statuses: Statuses in the order they were reached.

    Returns:
        True if the sequence starts at INTAKE and every step is an edge.
    """
    if not statuses or statuses[0] is not INITIAL_STATUS:
        return False
    return all(
        is_valid_transition(current, following)
        for current, following in zip(statuses, statuses[1:])
    )


def parse_status(value: MissionStatus | str, field_name: str = "to_status") -> MissionStatus:
    """Convert a raw value to a MissionStatus at the validation boundary.

    Args:
        value: A MissionStatus or its string value.
        field_name: Field name reported on failure.

    Returns:
        The matching MissionStatus.

    Raises:
        MissionValidationError: If the value is not one of the ten statuses.
    """
    if isinstance(value, MissionStatus):
        return value
    if isinstance(value, str):
        try:
            return MissionStatus(value)
        except ValueError:
            pass
    raise MissionValidationError(field_name, f"Invalid {field_name}: {value!r}")


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision and normalize to UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def format_timestamp(moment: datetime) -> str:
    """Serialize a timestamp as ISO-8601 UTC with milliseconds and Z suffix."""
    return (
        truncate_to_millis(moment)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by format_timestamp."""
    return truncate_to_millis(datetime.fromisoformat(value.replace("Z", "+00:00")))


@dataclass(frozen=True)
class MissionCreateRequest:
    """Descriptive input for mission creation.

    Validation happens in the lifecycle engine so the first failing field
    can be reported; this class only carries the values.
    """

    offering_name: str
    asset_type: str
    target_raise: float
    jurisdiction: str


@dataclass(frozen=True, eq=True)
class Mission:
    """A fundraising mission tracked through the compliance lifecycle.

    Descriptive fields are immutable after creation; only ``status`` and
    ``updated_at`` change, and only through validated transitions.

    Attributes:
        id: UUID string assigned at creation.
        offering_name: Name of the offering.
        asset_type: Asset class being raised (e.g. "Equity").
        target_raise: Amount to raise, always > 0.
        jurisdiction: Governing jurisdiction.
        status: Current lifecycle status.
        created_at: Creation timestamp (UTC).
        updated_at: Timestamp of the last transition (UTC).
        exemption_type: Regulatory exemption, always 506(c).
    """

    id: str
    offering_name: str
    asset_type: str
    target_raise: float
    jurisdiction: str
    status: MissionStatus
    created_at: datetime
    updated_at: datetime
    exemption_type: ExemptionType = field(default=ExemptionType.C506)

    def __post_init__(self) -> None:
        """Validate mission invariants."""
        if not math.isfinite(self.target_raise) or self.target_raise <= 0:
            raise ValueError("target_raise must be a number greater than 0")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")

    def with_status(self, new_status: MissionStatus, updated_at: datetime) -> Mission:
        """Return a copy with a new status and update timestamp.

        Does not consult the transition table; the lifecycle engine does
        that before calling this.
        """
        return replace(self, status=new_status, updated_at=updated_at)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict in the wire format."""
        return {
            "id": self.id,
            "offering_name": self.offering_name,
            "asset_type": self.asset_type,
            "exemption_type": self.exemption_type.value,
            "target_raise": self.target_raise,
            "jurisdiction": self.jurisdiction,
            "status": self.status.value,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }


@dataclass(frozen=True, eq=True)
class AuditLogEntry:
    """One immutable event in a mission's audit ledger.

    Attributes:
        id: UUID string of the entry.
        mission_id: Mission the event belongs to.
        from_status: Status before the event; None only for creation.
        to_status: Status reached by the event.
        actor: Identifier of the requester.
        timestamp: Clock reading at the moment of the event.
        metadata: Optional payload stored verbatim, None when absent.
    """

    id: str
    mission_id: str
    from_status: MissionStatus | None
    to_status: MissionStatus
    actor: str
    timestamp: datetime
    metadata: Mapping[str, Any] | None = None

    @property
    def is_creation(self) -> bool:
        """True for the entry recorded when the mission was created."""
        return self.from_status is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict in the wire format."""
        return {
            "id": self.id,
            "mission_id": self.mission_id,
            "from_status": self.from_status.value if self.from_status else None,
            "to_status": self.to_status.value,
            "actor": self.actor,
            "timestamp": format_timestamp(self.timestamp),
            "metadata": dict(self.metadata) if self.metadata is not None else None,
        }
