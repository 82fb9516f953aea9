"""Time Authority Protocol - interface for reading the wall clock.

Services that need the current time inject a TimeAuthorityProtocol
implementation instead of calling datetime.now() directly. The mission
clock is the only production caller: it turns wall-clock readings into
strictly increasing event timestamps.

For production:
    Use SystemTimeAuthority from smartfunds/application/services/

For testing:
    Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for wall-clock time.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.utcnow()  # NOT datetime.now()
    """

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time.

        Returns:
            Current timezone-aware datetime in UTC. Successive calls may
            return equal or even earlier values; callers needing a total
            order must not rely on this alone.
        """
        ...
