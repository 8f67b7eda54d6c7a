"""Test helpers for EGP tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    FROZEN_AT: Instant the shared fake_time_authority fixture is frozen at

Usage:
    from tests.helpers import FROZEN_AT, FakeTimeAuthority
"""

from tests.helpers.fake_time_authority import FROZEN_AT, FakeTimeAuthority

__all__ = ["FROZEN_AT", "FakeTimeAuthority"]
