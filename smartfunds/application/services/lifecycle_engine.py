"""Lifecycle Engine - mission creation and validated status transitions.

This service is the sole writer of missions and audit entries. It
validates input, consults the transition table, and persists each
mission write together with its audit entry inside one storage
transaction, both stamped with one reading of the mission clock.

Developer Golden Rules:
1. VALIDATE FIRST - Reject malformed input before touching storage
2. ONE CLOCK READING - updated_at and the ledger timestamp are the same value
3. PAIRED WRITES - Mission write and ledger append commit together or not at all
4. FAIL LOUD - Errors surface to the caller immediately, nothing is retried
5. LOG EVERYTHING - Every operation has structured logging
"""

from __future__ import annotations

import copy
import math
from collections.abc import Mapping
from numbers import Real
from typing import Any
from uuid import uuid4

from smartfunds.application.ports.mission_store import MissionStoreProtocol
from smartfunds.application.services.audit_ledger import AuditLedger
from smartfunds.application.services.base import LoggingMixin
from smartfunds.application.services.mission_clock import MissionClock
from smartfunds.application.services.mission_repository import MissionRepository
from smartfunds.domain.errors.mission import (
    InvalidTransitionError,
    MissionNotFoundError,
    MissionStatusGateError,
    MissionValidationError,
)
from smartfunds.domain.models.mission import (
    INITIAL_STATUS,
    AuditLogEntry,
    ExemptionType,
    Mission,
    MissionCreateRequest,
    MissionStatus,
    is_valid_transition,
    parse_status,
)


def _require_text(value: object, field_name: str) -> None:
    """Raise MissionValidationError unless value is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise MissionValidationError(field_name)


def _require_target_raise(value: object) -> None:
    """Raise MissionValidationError unless value is a finite number > 0.

    Integers too large for a float are rejected like infinities.
    """
    error = MissionValidationError(
        "target_raise", "target_raise must be a number greater than 0"
    )
    if isinstance(value, bool) or not isinstance(value, Real):
        raise error
    try:
        amount = float(value)
    except OverflowError:
        raise error from None
    if not math.isfinite(amount) or amount <= 0:
        raise error


class LifecycleEngine(LoggingMixin):
    """Orchestrates the mission lifecycle state machine and its audit ledger.

    Attributes:
        _store: Storage collaborator providing transactions.
        _missions: Mission record access.
        _ledger: Append-only audit ledger.
        _clock: Shared mission clock.
    """

    def __init__(self, store: MissionStoreProtocol, clock: MissionClock) -> None:
        """Initialize the engine.

        Args:
            store: Storage collaborator, constructed once by the composition root.
            clock: Mission clock shared by every entry point.
        """
        self._store = store
        self._missions = MissionRepository(store)
        self._ledger = AuditLedger(store)
        self._clock = clock
        self._init_logger(component="mission")

    async def create(self, request: MissionCreateRequest, actor: str) -> Mission:
        """Create a mission in INTAKE and record the creation in the ledger.

        Args:
            request: Descriptive fields of the offering.
            actor: Identifier of the requester.

        Returns:
            The created Mission with created_at == updated_at.

        Raises:
            MissionValidationError: Naming the first failing field, in the
                order offering_name, asset_type, target_raise, jurisdiction, actor.
        """
        _require_text(request.offering_name, "offering_name")
        _require_text(request.asset_type, "asset_type")
        _require_target_raise(request.target_raise)
        _require_text(request.jurisdiction, "jurisdiction")
        _require_text(actor, "actor")

        timestamp = self._clock.next()
        mission = Mission(
            id=str(uuid4()),
            offering_name=request.offering_name,
            asset_type=request.asset_type,
            target_raise=float(request.target_raise),
            jurisdiction=request.jurisdiction,
            status=INITIAL_STATUS,
            created_at=timestamp,
            updated_at=timestamp,
            exemption_type=ExemptionType.C506,
        )
        entry = AuditLogEntry(
            id=str(uuid4()),
            mission_id=mission.id,
            from_status=None,
            to_status=INITIAL_STATUS,
            actor=actor,
            timestamp=timestamp,
            metadata=None,
        )

        log = self._log_operation("create", mission_id=mission.id, actor=actor)
        async with self._store.transaction():
            await self._missions.add(mission)
            await self._ledger.append(entry)

        log.info(
            "mission_created",
            offering_name=mission.offering_name,
            target_raise=mission.target_raise,
        )
        return mission

    async def transition(
        self,
        mission_id: str,
        to_status: MissionStatus | str,
        actor: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> Mission:
        """Move a mission along one edge of the transition table.

        Not idempotent: repeating a transition that already succeeded is
        rejected because the mission's status has moved on.

        Args:
            mission_id: Mission to transition.
            to_status: Target status, as a MissionStatus or its string value.
            actor: Identifier of the requester.
            metadata: Optional payload stored verbatim in the audit entry.

        Returns:
            The updated Mission.

        Raises:
            MissionValidationError: Empty mission_id/actor, unknown status,
                or non-mapping metadata.
            MissionNotFoundError: If no mission has this id.
            InvalidTransitionError: If the edge is not in the table.
        """
        _require_text(mission_id, "mission_id")
        _require_text(actor, "actor")
        target = parse_status(to_status)
        if metadata is not None and not isinstance(metadata, Mapping):
            raise MissionValidationError("metadata", "metadata must be an object")
        stored_metadata = copy.deepcopy(dict(metadata)) if metadata is not None else None

        log = self._log_operation(
            "transition",
            mission_id=mission_id,
            to_status=target.value,
            actor=actor,
        )

        async with self._store.transaction():
            current = await self._missions.get(mission_id)
            if current is None:
                log.warning("mission_not_found")
                raise MissionNotFoundError(mission_id)

            if not is_valid_transition(current.status, target):
                log.warning(
                    "mission_transition_rejected",
                    from_status=current.status.value,
                )
                raise InvalidTransitionError(
                    from_status=current.status,
                    to_status=target,
                    allowed_transitions=sorted(
                        current.status.valid_transitions(), key=lambda s: s.value
                    ),
                )

            timestamp = self._clock.next()
            updated = current.with_status(target, timestamp)
            await self._missions.update_status(mission_id, target, timestamp)
            await self._ledger.append(
                AuditLogEntry(
                    id=str(uuid4()),
                    mission_id=mission_id,
                    from_status=current.status,
                    to_status=target,
                    actor=actor,
                    timestamp=timestamp,
                    metadata=stored_metadata,
                )
            )

        log.info("mission_transitioned", from_status=current.status.value)
        return updated

    async def get_audit_log(self, mission_id: str) -> list[AuditLogEntry]:
        """Return a mission's audit entries ordered by (timestamp, id).

        Raises:
            MissionNotFoundError: If no mission has this id.
        """
        if await self._missions.get(mission_id) is None:
            raise MissionNotFoundError(mission_id)
        return await self._ledger.entries_for(mission_id)

    async def get(self, mission_id: str) -> Mission | None:
        """Return the mission with this id, or None if absent."""
        return await self._missions.get(mission_id)

    async def list(self) -> list[Mission]:
        """Return all missions ordered by (created_at, id)."""
        return await self._missions.list()

    async def require_status(self, mission_id: str, status: MissionStatus) -> Mission:
        """Read-only status gate for downstream consumers.

        Document assembly uses this to proceed only when a mission has
        reached a given stage. It never changes the mission.

        Returns:
            The mission, when it is in the required status.

        Raises:
            MissionNotFoundError: If no mission has this id.
            MissionStatusGateError: If the mission is in another status.
        """
        mission = await self._missions.get(mission_id)
        if mission is None:
            raise MissionNotFoundError(mission_id)
        if mission.status is not status:
            raise MissionStatusGateError(
                mission_id=mission_id,
                expected_status=status,
                actual_status=mission.status,
            )
        return mission
