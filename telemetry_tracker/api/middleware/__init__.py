"""ASGI middleware for the request-telemetry pipeline.

Order, outermost first:
    PanicRecoveryMiddleware -> RequestContextMiddleware ->
    RequestTelemetryMiddleware -> TracingMiddleware -> routes
"""

from fastapi import FastAPI

from telemetry_tracker.api.middleware.recorder import ResponseRecorder
from telemetry_tracker.api.middleware.recovery import PanicRecoveryMiddleware
from telemetry_tracker.api.middleware.request_context import (
    RequestContextMiddleware,
    ensure_request_id,
    get_client_addr,
    get_request_id,
)
from telemetry_tracker.api.middleware.telemetry import RequestTelemetryMiddleware
from telemetry_tracker.api.middleware.tracing import TracingMiddleware
from telemetry_tracker.config.models.api import APIConfig
from telemetry_tracker.observability.metrics import MetricsRegistry
from telemetry_tracker.observability.provider import ObservabilityProvider


def install_middleware(
    app: FastAPI,
    provider: ObservabilityProvider,
    metrics: MetricsRegistry,
    config: APIConfig,
) -> None:
    """Install the pipeline on ``app``.

    Starlette wraps each newly added middleware around the previous ones,
    so they are added innermost first.
    """
    app.add_middleware(TracingMiddleware, tracer=provider.tracer)
    app.add_middleware(RequestTelemetryMiddleware, logger=provider.logger, metrics=metrics)
    app.add_middleware(
        RequestContextMiddleware,
        header_name=config.request_id_header,
        trust_forwarded_headers=config.trust_forwarded_headers,
    )
    app.add_middleware(
        PanicRecoveryMiddleware,
        logger=provider.logger,
        request_id_header=config.request_id_header,
    )


__all__ = [
    "PanicRecoveryMiddleware",
    "RequestContextMiddleware",
    "RequestTelemetryMiddleware",
    "ResponseRecorder",
    "TracingMiddleware",
    "ensure_request_id",
    "get_client_addr",
    "get_request_id",
    "install_middleware",
]
