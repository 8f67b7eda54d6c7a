"""Host clock implementation of TimeAuthorityProtocol."""

from datetime import datetime, timezone

from egp.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Reads the host clock, always in UTC."""

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)
