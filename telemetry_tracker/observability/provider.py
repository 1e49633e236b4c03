"""Observability provider lifecycle.

``init_observability`` builds the process logger, tracer and meter for one
of several modes, together with the shutdown routine of every exporter it
started. ``ObservabilityProvider.shutdown`` drains all of them within a
deadline and reports every failure at once.

Nothing here installs OpenTelemetry globals. The provider is created once
at startup and handed to whatever needs it.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.metrics import Meter, NoOpMeterProvider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import NoOpTracerProvider, Tracer

from telemetry_tracker.config.models.observability import ObservabilityConfig
from telemetry_tracker.observability.logging import get_logger, setup_logging

# Instrumentation scope for every tracer and meter handed out
SCHEMA_NAME = "telemetry_tracker"

DEFAULT_SHUTDOWN_TIMEOUT = 10.0


class ProviderState(str, Enum):
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class ObservabilityInitError(Exception):
    """Raised when any exporter fails to initialize; no provider is returned."""


class ShutdownError(ExceptionGroup):
    """Every exporter shutdown failure from one ``shutdown`` call."""


@dataclass(frozen=True)
class ShutdownTask:
    """One exporter's drain-and-close routine.

    ``run`` receives the overall timeout in seconds and raises on failure.
    """

    name: str
    run: Callable[[float], None]


class ObservabilityProvider:
    """Owns the process logger, tracer and meter and their exporters.

    Read-only use of ``logger``, ``tracer`` and ``meter`` is safe from any
    number of concurrent requests. ``shutdown`` must only be called after
    the HTTP listener has stopped accepting connections.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        tracer: Tracer,
        meter: Meter,
        shutdown_tasks: list[ShutdownTask] | None = None,
    ) -> None:
        self._logger = logger
        self._tracer = tracer
        self._meter = meter
        self._shutdown_tasks = list(shutdown_tasks or [])
        self._state = ProviderState.READY
        self._lock = threading.Lock()

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return self._logger

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def meter(self) -> Meter:
        return self._meter

    @property
    def state(self) -> ProviderState:
        return self._state

    def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> None:
        """Drain and close every exporter within ``timeout`` seconds.

        All exporters are shut down even when some fail. Exporters still
        running at the deadline are abandoned and reported as TimeoutError.
        Calling this again after the first call is a no-op.

        Raises:
            ShutdownError: If at least one exporter failed or timed out
        """
        with self._lock:
            if self._state is not ProviderState.READY:
                return
            self._state = ProviderState.SHUTTING_DOWN
            tasks, self._shutdown_tasks = self._shutdown_tasks, []

        try:
            errors = run_shutdown_tasks(tasks, timeout)
        finally:
            self._state = ProviderState.TERMINATED

        if errors:
            raise ShutdownError("observability shutdown failed", errors)


def run_shutdown_tasks(tasks: list[ShutdownTask], timeout: float) -> list[Exception]:
    """Run every task concurrently and collect failures until the deadline.

    Tasks run on daemon threads so an exporter stuck past the deadline can
    neither block the caller nor keep the interpreter alive.
    """
    deadline = time.monotonic() + timeout
    outcomes: dict[int, Exception | None] = {}
    outcomes_lock = threading.Lock()

    def _run(index: int, task: ShutdownTask) -> None:
        error: Exception | None = None
        try:
            task.run(timeout)
        except Exception as exc:
            error = exc
        with outcomes_lock:
            outcomes[index] = error

    threads = [
        threading.Thread(
            target=_run,
            args=(index, task),
            name=f"observability-shutdown-{task.name}",
            daemon=True,
        )
        for index, task in enumerate(tasks)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(max(0.0, deadline - time.monotonic()))

    errors: list[Exception] = []
    with outcomes_lock:
        for index, task in enumerate(tasks):
            if index not in outcomes:
                errors.append(
                    TimeoutError(f"{task.name} exporter did not shut down within {timeout}s")
                )
                continue
            error = outcomes[index]
            if error is not None:
                error.add_note(f"while shutting down the {task.name} exporter")
                errors.append(error)
    return errors


def create_resource(config: ObservabilityConfig) -> Resource:
    """Resource attributes attached to every span, metric and log record."""
    return Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        DEPLOYMENT_ENVIRONMENT: config.environment,
    })


def _drain_tracer_provider(provider: TracerProvider) -> Callable[[float], None]:
    def run(timeout: float) -> None:
        try:
            flushed = provider.force_flush(int(timeout * 1000))
        finally:
            provider.shutdown()
        if not flushed:
            raise TimeoutError("pending spans were not flushed before the deadline")

    return run


def _drain_meter_provider(
    provider: MeterProvider,
    runtime: SystemMetricsInstrumentor | None = None,
) -> Callable[[float], None]:
    # SystemMetricsInstrumentor is a process-wide singleton; it is released
    # only after the final collection.
    def run(timeout: float) -> None:
        try:
            provider.shutdown(timeout_millis=timeout * 1000)
        finally:
            if runtime is not None:
                runtime.uninstrument()

    return run


def _instrument_runtime(meter_provider: MeterProvider) -> SystemMetricsInstrumentor:
    """Report process and interpreter runtime metrics through ``meter_provider``."""
    instrumentor = SystemMetricsInstrumentor()
    instrumentor.instrument(meter_provider=meter_provider)
    return instrumentor


def _drain_logger_provider(provider: LoggerProvider) -> Callable[[float], None]:
    def run(timeout: float) -> None:
        try:
            flushed = provider.force_flush(int(timeout * 1000))
        finally:
            provider.shutdown()
        if not flushed:
            raise TimeoutError("pending log records were not flushed before the deadline")

    return run


@dataclass
class OTelSDK:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    logger_provider: LoggerProvider
    shutdown_tasks: list[ShutdownTask]


def setup_otel_sdk(config: ObservabilityConfig) -> OTelSDK:
    """Build OTLP trace, metric and log pipelines.

    Fail-fast: if any exporter cannot be constructed, the ones already
    built are shut down and ObservabilityInitError is raised.
    """
    resource = create_resource(config)
    tasks: list[ShutdownTask] = []

    try:
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=True))
        )
        tasks.append(ShutdownTask("traces", _drain_tracer_provider(tracer_provider)))

        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=config.otlp_endpoint, insecure=True),
            export_interval_millis=config.metric_export_interval_ms,
        )
        meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
        runtime = _instrument_runtime(meter_provider)
        tasks.append(ShutdownTask("metrics", _drain_meter_provider(meter_provider, runtime)))

        logger_provider = LoggerProvider(resource=resource)
        logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(OTLPLogExporter(endpoint=config.otlp_endpoint, insecure=True))
        )
        tasks.append(ShutdownTask("logs", _drain_logger_provider(logger_provider)))
    except Exception as exc:
        init_error = ObservabilityInitError(f"failed to initialize OTLP exporters: {exc}")
        for cleanup_error in run_shutdown_tasks(tasks, timeout=1.0):
            init_error.add_note(f"cleanup failed: {cleanup_error!r}")
        raise init_error from exc

    return OTelSDK(tracer_provider, meter_provider, logger_provider, tasks)


def init_observability(
    mode: str,
    config: ObservabilityConfig | None = None,
    log_format: str = "json",
    log_level: str | None = None,
) -> ObservabilityProvider:
    """Construct the provider for ``mode``.

    Modes:
        otel: OTLP export of traces, metrics and logs, plus process runtime metrics
        local: Prometheus-scrapable metrics, no tracing
        debug: debug-level logs, spans printed to the console
        noop: warnings only, no tracing or metrics

    ``log_level`` overrides the level the mode would otherwise choose.

    Raises:
        ObservabilityInitError: Unknown mode or an exporter failed to start
    """
    config = config or ObservabilityConfig()

    if mode == "otel":
        sdk = setup_otel_sdk(config)
        otel_handler = LoggingHandler(level=logging.NOTSET, logger_provider=sdk.logger_provider)
        setup_logging(log_level or "INFO", log_format, extra_handlers=[otel_handler])
        return ObservabilityProvider(
            logger=get_logger(SCHEMA_NAME, env="otel"),
            tracer=sdk.tracer_provider.get_tracer(SCHEMA_NAME),
            meter=sdk.meter_provider.get_meter(SCHEMA_NAME),
            shutdown_tasks=sdk.shutdown_tasks,
        )

    if mode == "local":
        try:
            meter_provider = MeterProvider(
                resource=create_resource(config),
                metric_readers=[PrometheusMetricReader()],
            )
        except Exception as exc:
            raise ObservabilityInitError(f"failed to initialize Prometheus reader: {exc}") from exc
        setup_logging(log_level or "INFO", log_format)
        return ObservabilityProvider(
            logger=get_logger(SCHEMA_NAME, env="local"),
            tracer=NoOpTracerProvider().get_tracer(SCHEMA_NAME),
            meter=meter_provider.get_meter(SCHEMA_NAME),
            shutdown_tasks=[ShutdownTask("metrics", _drain_meter_provider(meter_provider))],
        )

    if mode == "debug":
        tracer_provider = TracerProvider(resource=create_resource(config))
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        setup_logging(log_level or "DEBUG", log_format)
        return ObservabilityProvider(
            logger=get_logger(SCHEMA_NAME, env="debug", debug=True),
            tracer=tracer_provider.get_tracer(SCHEMA_NAME),
            meter=NoOpMeterProvider().get_meter(SCHEMA_NAME),
            shutdown_tasks=[ShutdownTask("traces", _drain_tracer_provider(tracer_provider))],
        )

    if mode == "noop":
        setup_logging(log_level or "WARNING", log_format)
        return ObservabilityProvider(
            logger=get_logger(SCHEMA_NAME, env="noop"),
            tracer=NoOpTracerProvider().get_tracer(SCHEMA_NAME),
            meter=NoOpMeterProvider().get_meter(SCHEMA_NAME),
        )

    raise ObservabilityInitError(f"unsupported observability mode: {mode}")
