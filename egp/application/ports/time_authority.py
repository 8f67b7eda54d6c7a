"""Clock port.

Record timestamps, sunset gates, trial ends and review schedules are all
computed from one injected clock, never from datetime.now(), so tests can
freeze time and step across a sunset.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of the current instant.

    Production wires SystemTimeAuthority; tests use FakeTimeAuthority
    from tests/helpers.
    """

    @abstractmethod
    def utcnow(self) -> datetime:
        """Current instant as a timezone-aware UTC datetime."""
        ...
