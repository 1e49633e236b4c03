"""OpenTelemetry tracing helpers.

Span creation, W3C trace context propagation and exception recording.
Tracers are always passed in explicitly; nothing here reads a global
tracer provider.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

# W3C Trace Context propagator
_propagator = TraceContextTextMapPropagator()


def http_span_name(method: str, path: str) -> str:
    """Span name used for one inbound request."""
    return f"HTTP {method} {path}"


def extract_context(headers: Mapping[str, str]) -> Context:
    """Extract trace context from HTTP headers (traceparent/tracestate)."""
    return _propagator.extract(carrier=dict(headers))


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a hex string, or None outside a trace."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.trace_id, "032x")
    return None


def get_current_span_id() -> str | None:
    """Get the current span ID as a hex string, or None outside a span."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.span_id, "016x")
    return None


@contextmanager
def create_span(
    tracer: Tracer,
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    context: Context | None = None,
) -> Generator[Span, None, None]:
    """Create a new span as a context manager.

    The span becomes current for the block and is ended on every exit
    path. An exception escaping the block is recorded on the span and
    marks it as an error before propagating.
    """
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes=attributes or {},
        context=context,
    ) as span:
        yield span


def record_exception(span: Span, exception: BaseException, description: str | None = None) -> None:
    """Record an exception on a span and mark it as failed."""
    span.record_exception(exception)
    span.set_status(Status(StatusCode.ERROR, description or str(exception)))


def set_span_attributes(span: Span, **attributes: Any) -> None:
    """Set multiple attributes on a span, skipping None values."""
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Add an event to the current span; a no-op outside a span."""
    trace.get_current_span().add_event(name, attributes=attributes or {})
