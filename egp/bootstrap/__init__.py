"""Startup wiring for the EGP node."""
