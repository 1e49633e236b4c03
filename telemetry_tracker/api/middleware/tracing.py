"""One server span per request."""

from opentelemetry.trace import SpanKind, Status, StatusCode, Tracer
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from telemetry_tracker.api.middleware.recorder import ResponseRecorder
from telemetry_tracker.api.middleware.request_context import ensure_request_id, get_client_addr
from telemetry_tracker.observability.tracing import (
    extract_context,
    http_span_name,
    set_span_attributes,
)


class TracingMiddleware:
    """Opens ``HTTP <method> <path>`` around the rest of the chain.

    The span is current for everything downstream and is ended on every
    exit path. An escaping exception is recorded on it before it
    propagates; 5xx responses mark it as an error. An incoming W3C
    ``traceparent`` makes it a child of the caller's span.
    """

    def __init__(self, app: ASGIApp, tracer: Tracer) -> None:
        self.app = app
        self.tracer = tracer

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method: str = scope["method"]
        path: str = scope["path"]
        headers = Headers(scope=scope)
        recorder = ResponseRecorder(send)

        with self.tracer.start_as_current_span(
            http_span_name(method, path),
            context=extract_context(headers),
            kind=SpanKind.SERVER,
            attributes={
                "http.request.method": method,
                "url.path": path,
                "request_id": ensure_request_id(scope),
            },
        ) as span:
            set_span_attributes(
                span,
                **{
                    "user_agent.original": headers.get("user-agent"),
                    "client.address": get_client_addr(scope),
                },
            )
            try:
                await self.app(scope, receive, recorder)
            finally:
                if recorder.status is not None:
                    span.set_attribute("http.response.status_code", recorder.status)
                    if recorder.status >= 500:
                        span.set_status(Status(StatusCode.ERROR))
