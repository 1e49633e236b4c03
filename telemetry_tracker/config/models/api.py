"""API server configuration."""

from pydantic import BaseModel, Field


class APIConfig(BaseModel):
    """HTTP listener and request-context settings."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")
    request_id_header: str = Field(
        default="X-Request-ID",
        description="Header carrying an upstream-assigned request identifier",
    )
    trust_forwarded_headers: bool = Field(
        default=True,
        description="Resolve client address from X-Forwarded-For / X-Real-IP",
    )
    graceful_shutdown_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Time allowed for in-flight requests when the listener stops",
    )
