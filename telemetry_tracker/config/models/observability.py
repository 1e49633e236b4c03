"""Observability configuration."""

from typing import Literal

from pydantic import BaseModel, Field

ObservabilityMode = Literal["otel", "local", "debug", "noop"]


class ObservabilityConfig(BaseModel):
    """Settings consumed by init_observability."""

    mode: ObservabilityMode = Field(
        default="local",
        description="otel: OTLP export; local: Prometheus scrape; debug: console spans; noop: silent",
    )
    service_name: str = Field(default="telemetry-tracker")
    service_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    otlp_endpoint: str = Field(
        default="http://otel-collector:4317",
        description="OTLP gRPC collector endpoint for traces, metrics and logs",
    )
    metric_export_interval_ms: int = Field(default=30000, gt=0)
    shutdown_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline for draining every exporter at shutdown",
    )
