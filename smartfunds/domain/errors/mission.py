"""Mission lifecycle errors.

This module defines the error taxonomy of the mission engine:

- MissionValidationError: malformed create/transition input, raised before
  anything is written.
- MissionNotFoundError: an operation referenced an unknown mission id.
- InvalidTransitionError: the requested edge is absent from the
  transition table for the mission's current status.
- MissionAlreadyExistsError: storage integrity failure on insert.
- MissionStatusGateError: a downstream consumer required a lifecycle
  stage the mission is not in.

Errors are local to a single call and are never retried by the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from smartfunds.domain.exceptions import MissionEngineError

if TYPE_CHECKING:
    from smartfunds.domain.models.mission import MissionStatus


class MissionValidationError(MissionEngineError):
    """Raised when create or transition input fails validation.

    Attributes:
        field: Name of the first input field that failed validation.
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending field.
            message: Optional message. Defaults to "<field> is required".
        """
        self.field = field
        super().__init__(message or f"{field} is required")


class MissionNotFoundError(MissionEngineError):
    """Raised when no mission exists for the requested id.

    Attributes:
        mission_id: The id that was looked up.
    """

    def __init__(self, mission_id: str) -> None:
        """Initialize not-found error.

        Args:
            mission_id: The id that was looked up.
        """
        self.mission_id = mission_id
        super().__init__(f"Mission not found: {mission_id}")


class InvalidTransitionError(MissionEngineError):
    """Raised when a status change is not an edge of the transition table.

    Covers transitions out of the terminal status, attempts to skip
    stages and self-transitions.

    Attributes:
        from_status: Current status of the mission.
        to_status: Requested target status.
        allowed_transitions: Valid targets from the current status.
    """

    def __init__(
        self,
        from_status: MissionStatus,
        to_status: MissionStatus,
        allowed_transitions: list[MissionStatus] | None = None,
    ) -> None:
        """Initialize invalid transition error.

        Args:
            from_status: Current mission status.
            to_status: Attempted target status.
            allowed_transitions: Valid targets from the current status (optional).
        """
        self.from_status = from_status
        self.to_status = to_status
        self.allowed_transitions = allowed_transitions or []
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}"
        )


class MissionAlreadyExistsError(MissionEngineError):
    """Raised when inserting a mission whose id is already stored.

    Attributes:
        mission_id: The duplicated id.
    """

    def __init__(self, mission_id: str) -> None:
        self.mission_id = mission_id
        super().__init__(f"Mission already exists: {mission_id}")


class MissionStatusGateError(MissionEngineError):
    """Raised when a mission is not in the lifecycle stage a consumer requires.

    Attributes:
        mission_id: The gated mission.
        expected_status: Stage the consumer requires.
        actual_status: Stage the mission is currently in.
    """

    def __init__(
        self,
        mission_id: str,
        expected_status: MissionStatus,
        actual_status: MissionStatus,
    ) -> None:
        self.mission_id = mission_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Mission {mission_id} is {actual_status.value}, "
            f"expected {expected_status.value}"
        )
