"""Mission clock - strictly increasing timestamps for lifecycle events.

Two events in one mission's history must never carry equal or out-of-order
timestamps, even when transitions are requested within the same wall-clock
millisecond or the host clock steps backwards. The mission clock tracks the
last value it issued; when the wall clock has not moved strictly past it,
the clock issues the last value plus one millisecond.

A mission's updated_at and the matching audit entry's timestamp come from
one reading of this clock, so the two stay in lockstep.

Usage:
    clock = MissionClock(SystemTimeAuthority())
    t1 = clock.next()
    t2 = clock.next()
    assert t2 > t1
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta

from smartfunds.application.ports.time_authority import TimeAuthorityProtocol
from smartfunds.domain.models.mission import truncate_to_millis

# Smallest representable step of the serialized timestamp format
CLOCK_RESOLUTION = timedelta(milliseconds=1)


class MissionClock:
    """Logical clock issuing a total order of millisecond UTC timestamps.

    One instance is created by the composition root and shared by every
    entry point that produces a mission or audit entry. Calls from
    concurrent threads are serialized by an internal lock.

    Attributes:
        _time: Wall-clock source.
        _last_issued: Last timestamp returned by next(), None before the first call.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
        """Initialize the clock.

        Args:
            time_authority: Source of wall-clock readings.
        """
        self._time = time_authority
        self._last_issued: datetime | None = None
        self._lock = threading.Lock()

    def next(self) -> datetime:
        """Return a timestamp strictly greater than every previous one.

        Returns:
            Timezone-aware UTC datetime truncated to milliseconds.
        """
        with self._lock:
            now = truncate_to_millis(self._time.utcnow())
            if self._last_issued is not None and now <= self._last_issued:
                now = self._last_issued + CLOCK_RESOLUTION
            self._last_issued = now
            return now

    @property
    def last_issued(self) -> datetime | None:
        """The most recent timestamp returned by next()."""
        with self._lock:
            return self._last_issued
