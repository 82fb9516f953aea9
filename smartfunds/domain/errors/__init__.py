"""Domain errors for the mission engine.

All exceptions inherit from MissionEngineError.
"""

from smartfunds.domain.errors.mission import (
    InvalidTransitionError,
    MissionAlreadyExistsError,
    MissionNotFoundError,
    MissionStatusGateError,
    MissionValidationError,
)

__all__: list[str] = [
    "InvalidTransitionError",
    "MissionAlreadyExistsError",
    "MissionNotFoundError",
    "MissionStatusGateError",
    "MissionValidationError",
]
