"""Health check and node info response models."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: "healthy" when the content store is reachable, else "degraded".
        timestamp: Current instant in ISO 8601 format.
        version: Package version.
        uptime: Seconds since the process started.
        store: Content store status as reported by the backend.
    """

    status: str
    timestamp: str
    version: str
    uptime: float
    store: dict[str, object] = Field(default_factory=dict)


class NodeInfoResponse(BaseModel):
    """Node description served at the API root."""

    name: str = "EGP Node"
    description: str = "Reference implementation of the Emergent Governance Protocol"
    version: str
    protocol_version: str
    node_id: str
    endpoints: dict[str, str]
