"""Tests for TracingMiddleware."""

import pytest
from opentelemetry import trace
from opentelemetry.trace import SpanKind, StatusCode

from telemetry_tracker.api.middleware.tracing import TracingMiddleware
from tests.helpers import SentMessages, empty_receive, http_scope, respond

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
PARENT_SPAN_ID = "00f067aa0ba902b7"


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("test")


class TestTracingMiddleware:
    """Tests for the per-request server span."""

    @pytest.mark.asyncio
    async def test_span_per_request(self, tracer, span_exporter) -> None:
        scope = http_scope("POST", "/events", headers=[(b"user-agent", b"sdk/2")])

        await TracingMiddleware(respond(202), tracer)(scope, empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "HTTP POST /events"
        assert span.kind is SpanKind.SERVER
        assert span.attributes["http.request.method"] == "POST"
        assert span.attributes["url.path"] == "/events"
        assert span.attributes["http.response.status_code"] == 202
        assert span.attributes["user_agent.original"] == "sdk/2"
        assert span.attributes["client.address"] == "10.0.0.1"
        assert span.status.status_code is StatusCode.UNSET

    @pytest.mark.asyncio
    async def test_server_error_marks_span(self, tracer, span_exporter) -> None:
        await TracingMiddleware(respond(500), tracer)(http_scope(), empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert span.status.status_code is StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_client_error_does_not_mark_span(self, tracer, span_exporter) -> None:
        await TracingMiddleware(respond(404), tracer)(http_scope(), empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert span.status.status_code is StatusCode.UNSET

    @pytest.mark.asyncio
    async def test_span_closed_when_handler_raises(self, tracer, span_exporter) -> None:
        async def broken(scope, receive, send) -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await TracingMiddleware(broken, tracer)(http_scope(), empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert span.end_time is not None
        assert span.status.status_code is StatusCode.ERROR
        assert span.events[0].name == "exception"

    @pytest.mark.asyncio
    async def test_span_is_current_downstream(self, tracer, span_exporter) -> None:
        seen: list[int] = []

        async def handler(scope, receive, send) -> None:
            seen.append(trace.get_current_span().get_span_context().span_id)
            await respond(200)(scope, receive, send)

        await TracingMiddleware(handler, tracer)(http_scope(), empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert seen == [span.context.span_id]

    @pytest.mark.asyncio
    async def test_joins_upstream_trace(self, tracer, span_exporter) -> None:
        traceparent = f"00-{TRACE_ID}-{PARENT_SPAN_ID}-01".encode()
        scope = http_scope(headers=[(b"traceparent", traceparent)])

        await TracingMiddleware(respond(200), tracer)(scope, empty_receive, SentMessages())

        (span,) = span_exporter.get_finished_spans()
        assert format(span.context.trace_id, "032x") == TRACE_ID
        assert format(span.parent.span_id, "016x") == PARENT_SPAN_ID
