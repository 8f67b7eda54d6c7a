"""Configuration for the EGP node."""

from egp.config.governance_config import GovernanceConfig, StoreBackend

__all__ = ["GovernanceConfig", "StoreBackend"]
