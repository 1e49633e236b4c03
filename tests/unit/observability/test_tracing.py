"""Tests for tracing helpers."""

import pytest
from opentelemetry.trace import SpanKind, StatusCode

from telemetry_tracker.observability.tracing import (
    add_span_event,
    create_span,
    extract_context,
    get_current_span_id,
    get_current_trace_id,
    http_span_name,
    record_exception,
    set_span_attributes,
)

TRACEPARENT = "00-0af7651916cd43dd8448eb211c80319c-b7ad6b7169203331-01"


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("test")


def test_http_span_name() -> None:
    assert http_span_name("POST", "/events") == "HTTP POST /events"


class TestCreateSpan:
    """Tests for create_span."""

    def test_span_is_current_and_ended(self, tracer, span_exporter) -> None:
        with create_span(tracer, "work", attributes={"event.type": "click"}) as span:
            assert get_current_trace_id() == format(span.get_span_context().trace_id, "032x")
            assert get_current_span_id() == format(span.get_span_context().span_id, "016x")

        (finished,) = span_exporter.get_finished_spans()
        assert finished.name == "work"
        assert finished.kind is SpanKind.INTERNAL
        assert finished.attributes["event.type"] == "click"

    def test_escaping_exception_recorded(self, tracer, span_exporter) -> None:
        with pytest.raises(ValueError):
            with create_span(tracer, "failing"):
                raise ValueError("bad")

        (finished,) = span_exporter.get_finished_spans()
        assert finished.status.status_code is StatusCode.ERROR
        assert finished.events[0].name == "exception"

    def test_nested_spans_share_trace(self, tracer, span_exporter) -> None:
        with create_span(tracer, "parent") as parent:
            with create_span(tracer, "child"):
                pass

        child, recorded_parent = span_exporter.get_finished_spans()
        assert child.parent.span_id == parent.get_span_context().span_id
        assert child.context.trace_id == recorded_parent.context.trace_id

    def test_no_current_span(self) -> None:
        assert get_current_trace_id() is None
        assert get_current_span_id() is None


class TestPropagation:
    """Tests for W3C trace context propagation."""

    def test_extracted_context_parents_span(self, tracer, span_exporter) -> None:
        context = extract_context({"traceparent": TRACEPARENT})

        with create_span(tracer, "server", kind=SpanKind.SERVER, context=context):
            pass

        (finished,) = span_exporter.get_finished_spans()
        assert format(finished.context.trace_id, "032x") == "0af7651916cd43dd8448eb211c80319c"
        assert format(finished.parent.span_id, "016x") == "b7ad6b7169203331"


class TestSpanHelpers:
    """Tests for record_exception and set_span_attributes."""

    def test_record_exception_marks_error(self, tracer, span_exporter) -> None:
        with create_span(tracer, "store") as span:
            record_exception(span, RuntimeError("db down"), "failed to store event")

        (finished,) = span_exporter.get_finished_spans()
        assert finished.status.status_code is StatusCode.ERROR
        assert finished.status.description == "failed to store event"

    def test_set_span_attributes_skips_none(self, tracer, span_exporter) -> None:
        with create_span(tracer, "attrs") as span:
            set_span_attributes(span, present="yes", missing=None)

        (finished,) = span_exporter.get_finished_spans()
        assert finished.attributes["present"] == "yes"
        assert "missing" not in finished.attributes

    def test_add_span_event_on_current_span(self, tracer, span_exporter) -> None:
        with create_span(tracer, "request"):
            add_span_event("event_stored", {"event.type": "click"})

        (finished,) = span_exporter.get_finished_spans()
        (event,) = finished.events
        assert event.name == "event_stored"
        assert event.attributes["event.type"] == "click"

    def test_add_span_event_outside_span(self) -> None:
        add_span_event("ignored")
