"""Application layer: ports, DTOs and lifecycle services."""
