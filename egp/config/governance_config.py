"""Governance node configuration.

This module defines node identity, lifecycle limits, advisor tuning and
content store selection, with environment variable overrides.

Environment Variables (Node):
- NODE_ID: Identifier stamped on every record (default: "unknown")
- EGP_PROTOCOL_VERSION: Protocol version stamped on records (default: "0.1.0-alpha")
- ENVIRONMENT: "production" for JSON logs, anything else for console (default: "development")

Environment Variables (Lifecycle):
- EGP_SUNSET_CEILING_DAYS: Longest sunset/validity span, in approximate days (default: 730)
- EGP_DEFAULT_MONITORING_FREQUENCY: Review cadence when an adoption names none (default: "P2W")
- EGP_MAX_REVIEWS: Upper bound on generated review dates (default: 1000)
- EGP_REQUEST_TIMEOUT_SECONDS: Deadline for one HTTP request's store calls, 0 disables (default: 30.0)

Environment Variables (Advisors):
- EGP_ADVISOR_TIMEOUT_SECONDS: Time budget per advisor call (default: 2.0)
- EGP_SIMILARITY_THRESHOLD: Minimum similarity for an echo (default: 0.3)

Environment Variables (Store):
- EGP_STORE_BACKEND: "memory" or "ipfs" (default: "memory")
- IPFS_API_URL: Kubo RPC endpoint (default: "http://127.0.0.1:5001")
- IPFS_TIMEOUT_SECONDS: Per-request timeout (default: 10.0)
- EGP_STORAGE_RETRY_AFTER: Retry-After seconds on store outages (default: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from egp.domain.models.duration import Duration
from egp.domain.models.governance_object import DEFAULT_NODE_ID, DEFAULT_PROTOCOL_VERSION


class StoreBackend(Enum):
    """Content store implementation to wire at startup."""

    MEMORY = "memory"
    IPFS = "ipfs"


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class GovernanceConfig:
    """Configuration for the governance lifecycle and its collaborators.

    Attributes:
        node_id: Identifier stamped on every record.
        protocol_version: Protocol version stamped on every record.
        environment: Deployment environment name.
        sunset_ceiling_days: Longest allowed span for sunsets and validity
            windows, compared against Duration.span_days.
        default_monitoring_frequency: Review cadence used when an adoption
            names none.
        max_reviews: Upper bound on the number of generated review dates.
        request_timeout_seconds: Deadline for the store calls of one HTTP
            request; 0 disables the deadline.
        advisor_timeout_seconds: Time budget for each advisor call.
        similarity_threshold: Minimum similarity score for an echo.
        store_backend: Which content store to wire.
        ipfs_api_url: Kubo RPC endpoint for the IPFS backend.
        ipfs_timeout_seconds: Per-request timeout for the IPFS backend.
        storage_retry_after_seconds: Retry-After hint on store outages.
    """

    node_id: str = DEFAULT_NODE_ID
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    environment: str = "development"
    sunset_ceiling_days: int = 730
    default_monitoring_frequency: str = "P2W"
    max_reviews: int = 1000
    request_timeout_seconds: float = 30.0
    advisor_timeout_seconds: float = 2.0
    similarity_threshold: float = 0.3
    store_backend: StoreBackend = StoreBackend.MEMORY
    ipfs_api_url: str = "http://127.0.0.1:5001"
    ipfs_timeout_seconds: float = 10.0
    storage_retry_after_seconds: int = 30

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.node_id:
            raise ValueError("node_id must not be empty")
        if self.sunset_ceiling_days < 1:
            raise ValueError(
                f"sunset_ceiling_days must be positive, got {self.sunset_ceiling_days}"
            )
        frequency = Duration.try_parse(self.default_monitoring_frequency)
        if frequency is None or frequency.is_zero:
            raise ValueError(
                "default_monitoring_frequency must be a non-empty ISO 8601 duration, "
                f"got {self.default_monitoring_frequency!r}"
            )
        if self.max_reviews < 1:
            raise ValueError(f"max_reviews must be positive, got {self.max_reviews}")
        if self.request_timeout_seconds < 0:
            raise ValueError(
                f"request_timeout_seconds must not be negative, got {self.request_timeout_seconds}"
            )
        if self.advisor_timeout_seconds <= 0:
            raise ValueError(
                f"advisor_timeout_seconds must be positive, got {self.advisor_timeout_seconds}"
            )
        if not 0.0 < self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in (0, 1], got {self.similarity_threshold}"
            )
        if self.ipfs_timeout_seconds <= 0:
            raise ValueError(
                f"ipfs_timeout_seconds must be positive, got {self.ipfs_timeout_seconds}"
            )
        if self.storage_retry_after_seconds < 1:
            raise ValueError(
                "storage_retry_after_seconds must be at least 1, "
                f"got {self.storage_retry_after_seconds}"
            )

    @classmethod
    def from_environment(cls) -> GovernanceConfig:
        """Create config from environment variables with defaults.

        Returns:
            GovernanceConfig with values from environment or defaults.

        Raises:
            ValueError: If a value is out of range or EGP_STORE_BACKEND is unknown.
        """
        backend_name = os.environ.get("EGP_STORE_BACKEND", StoreBackend.MEMORY.value)
        try:
            backend = StoreBackend(backend_name.lower())
        except ValueError:
            raise ValueError(
                f"EGP_STORE_BACKEND must be one of "
                f"{[b.value for b in StoreBackend]}, got {backend_name!r}"
            ) from None

        return cls(
            node_id=os.environ.get("NODE_ID", DEFAULT_NODE_ID),
            protocol_version=os.environ.get("EGP_PROTOCOL_VERSION", DEFAULT_PROTOCOL_VERSION),
            environment=os.environ.get("ENVIRONMENT", "development"),
            sunset_ceiling_days=_get_int_env("EGP_SUNSET_CEILING_DAYS", 730),
            default_monitoring_frequency=os.environ.get(
                "EGP_DEFAULT_MONITORING_FREQUENCY", "P2W"
            ),
            max_reviews=_get_int_env("EGP_MAX_REVIEWS", 1000),
            request_timeout_seconds=_get_float_env("EGP_REQUEST_TIMEOUT_SECONDS", 30.0),
            advisor_timeout_seconds=_get_float_env("EGP_ADVISOR_TIMEOUT_SECONDS", 2.0),
            similarity_threshold=_get_float_env("EGP_SIMILARITY_THRESHOLD", 0.3),
            store_backend=backend,
            ipfs_api_url=os.environ.get("IPFS_API_URL", "http://127.0.0.1:5001"),
            ipfs_timeout_seconds=_get_float_env("IPFS_TIMEOUT_SECONDS", 10.0),
            storage_retry_after_seconds=_get_int_env("EGP_STORAGE_RETRY_AFTER", 30),
        )
