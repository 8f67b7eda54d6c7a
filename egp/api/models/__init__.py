"""Pydantic response models for the EGP API."""
