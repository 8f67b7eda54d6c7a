"""HTTP API for the EGP node."""
