"""Infrastructure adapters for the EGP node."""
