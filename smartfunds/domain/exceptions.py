"""Base exception classes for the mission engine domain layer."""


class MissionEngineError(Exception):
    """Base exception for all domain errors.

    All mission engine exceptions inherit from this class so callers
    (the HTTP layer, document assembly) can catch engine failures as a
    group while still dispatching on the specific subclass.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
