"""System time authority backed by the host clock."""

from datetime import datetime, timezone

from smartfunds.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Production TimeAuthorityProtocol reading the host's UTC clock.

    The host clock can repeat a reading within one millisecond or step
    backwards after an NTP adjustment; MissionClock compensates for both.
    """

    def utcnow(self) -> datetime:
        """Return the host's current UTC time."""
        return datetime.now(timezone.utc)
