"""Outermost boundary that turns unexpected exceptions into a 500."""

import traceback

import structlog
from starlette.requests import ClientDisconnect
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from telemetry_tracker.api.middleware.recorder import ResponseRecorder
from telemetry_tracker.api.middleware.request_context import get_request_id
from telemetry_tracker.api.models.errors import ErrorCode, error_payload
from telemetry_tracker.observability.context import get_scope_logger

# The client went away; not an application failure
ABORT_EXCEPTIONS: tuple[type[BaseException], ...] = (ClientDisconnect,)


class PanicRecoveryMiddleware:
    """Catches anything the inner stack raised, exactly once per request.

    The exception is logged at error level with its stack trace using the
    request's logger, or a request-id-tagged fallback when the failure
    happened before one was attached. A generic 500 is sent only if no
    response has started; otherwise nothing more is written.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: structlog.stdlib.BoundLogger,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        self.app = app
        self.logger = logger
        self.request_id_header = request_id_header

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        recorder = ResponseRecorder(send)
        try:
            await self.app(scope, receive, recorder)
        except ABORT_EXCEPTIONS:
            raise
        except Exception as exc:
            request_id = get_request_id(scope)
            log = get_scope_logger(scope)
            if log is None:
                log = self.logger.bind(request_id=request_id or "")

            log.error(
                "panic_recovered",
                panic_value=repr(exc),
                error_type=type(exc).__name__,
                stack=traceback.format_exc(),
                response_started=recorder.started,
            )

            if not recorder.started:
                response = JSONResponse(
                    error_payload(ErrorCode.INTERNAL_ERROR, "Internal Server Error"),
                    status_code=500,
                    headers={self.request_id_header: request_id} if request_id else None,
                )
                await response(scope, receive, recorder)
