"""Per-request logging and HTTP metrics."""

import time

import structlog
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send
from structlog.contextvars import bound_contextvars

from telemetry_tracker.api.middleware.recorder import ResponseRecorder
from telemetry_tracker.api.middleware.request_context import ensure_request_id, get_client_addr
from telemetry_tracker.observability.context import attach_scope_logger, request_logger
from telemetry_tracker.observability.metrics import MetricsRegistry

# Status recorded when the app returns without starting a response; the
# ASGI server answers such requests with a 500.
NO_RESPONSE_STATUS = 500


class RequestTelemetryMiddleware:
    """Attaches a request logger, then records metrics and a completion log.

    For every request that returns normally: one request count, one
    duration and one size observation labelled with method and final
    status, and one ``request_completed`` log line whose level follows the
    status (error for 5xx, warning for 4xx, info otherwise). Exceptions
    propagate untouched to the recovery boundary.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: structlog.stdlib.BoundLogger,
        metrics: MetricsRegistry,
    ) -> None:
        self.app = app
        self.logger = logger
        self.metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method: str = scope["method"]
        path: str = scope["path"]
        request_id = ensure_request_id(scope)
        headers = Headers(scope=scope)

        log = self.logger.bind(
            method=method,
            path=path,
            remote_addr=get_client_addr(scope),
            user_agent=headers.get("user-agent", ""),
            request_id=request_id,
        )
        attach_scope_logger(scope, log)

        recorder = ResponseRecorder(send)
        start = time.perf_counter()

        with request_logger(log), bound_contextvars(request_id=request_id):
            await self.app(scope, receive, recorder)

        duration = time.perf_counter() - start
        status = recorder.status if recorder.status is not None else NO_RESPONSE_STATUS

        self.metrics.record_http_request(method, status)
        self.metrics.observe_request_duration(method, status, duration)
        self.metrics.observe_response_size(method, status, recorder.bytes_written)

        if status >= 500:
            log_fn = log.error
        elif status >= 400:
            log_fn = log.warning
        else:
            log_fn = log.info

        log_fn(
            "request_completed",
            status=status,
            bytes=recorder.bytes_written,
            duration_ms=round(duration * 1000, 3),
        )
