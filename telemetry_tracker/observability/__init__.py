"""Observability: structured logging, distributed tracing, metrics.

Provides structlog-based logging with a request-scoped logger context,
OpenTelemetry tracing and metrics, and the provider that owns their
exporters for the lifetime of the process.
"""

from telemetry_tracker.observability.context import (
    get_request_logger,
    get_request_logger_or_default,
    request_logger,
)
from telemetry_tracker.observability.logging import get_logger, setup_logging
from telemetry_tracker.observability.metrics import MetricsRegistry
from telemetry_tracker.observability.provider import (
    ObservabilityInitError,
    ObservabilityProvider,
    ProviderState,
    ShutdownError,
    ShutdownTask,
    init_observability,
)

__all__ = [
    "MetricsRegistry",
    "ObservabilityInitError",
    "ObservabilityProvider",
    "ProviderState",
    "ShutdownError",
    "ShutdownTask",
    "get_logger",
    "get_request_logger",
    "get_request_logger_or_default",
    "init_observability",
    "request_logger",
    "setup_logging",
]
