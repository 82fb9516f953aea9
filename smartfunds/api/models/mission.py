"""Mission API request/response models.

Pydantic models for the mission lifecycle endpoints. Requests are
validated for shape here; business validation (blank strings, positive
target_raise, legal transitions) stays in the lifecycle engine so the HTTP
layer and direct callers get the same errors.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, PlainSerializer

from smartfunds.domain.models.mission import AuditLogEntry, Mission, format_timestamp

# ISO 8601 with milliseconds and Z suffix, matching the ledger format
MissionTimestamp = Annotated[
    datetime,
    PlainSerializer(format_timestamp, return_type=str),
]


class CreateMissionRequest(BaseModel):
    """Request body for creating a mission."""

    offering_name: str = Field(..., description="Name of the offering")
    asset_type: str = Field(..., description="Asset class, e.g. Equity or Debt")
    target_raise: float = Field(..., description="Amount to raise, must be > 0")
    jurisdiction: str = Field(..., description="Governing jurisdiction")
    actor: str = Field(..., description="Identifier of the requester")


class TransitionMissionRequest(BaseModel):
    """Request body for transitioning a mission."""

    to_status: str = Field(..., description="Target lifecycle status")
    actor: str = Field(..., description="Identifier of the requester")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Optional payload stored verbatim in the audit entry",
    )


class MissionResponse(BaseModel):
    """A mission as returned by the API."""

    id: str
    offering_name: str
    asset_type: str
    exemption_type: str
    target_raise: float
    jurisdiction: str
    status: str
    created_at: MissionTimestamp
    updated_at: MissionTimestamp

    @classmethod
    def from_domain(cls, mission: Mission) -> "MissionResponse":
        """Convert a domain Mission to the response model."""
        return cls.model_validate(mission.to_dict())


class AuditLogEntryResponse(BaseModel):
    """An audit ledger entry as returned by the API."""

    id: str
    mission_id: str
    from_status: str | None
    to_status: str
    actor: str
    timestamp: MissionTimestamp
    metadata: dict[str, Any] | None

    @classmethod
    def from_domain(cls, entry: AuditLogEntry) -> "AuditLogEntryResponse":
        """Convert a domain AuditLogEntry to the response model."""
        return cls.model_validate(entry.to_dict())


class MissionErrorResponse(BaseModel):
    """RFC 7807 error body for mission endpoints."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    details: dict[str, Any] | None = None
