"""Request-scoped logger context.

The logger for the current request lives in a module-private ContextVar
and, for outer middleware, under a private key in the ASGI scope state.
Access it only through the functions below, never through raw lookups.
"""

from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any

import structlog

_request_logger: ContextVar[structlog.stdlib.BoundLogger | None] = ContextVar(
    "telemetry_tracker_request_logger", default=None
)

_SCOPE_LOGGER_KEY = "telemetry_tracker.request_logger"


def get_request_logger() -> structlog.stdlib.BoundLogger | None:
    """Return the logger attached to the current request, if any.

    Absence is normal for code running outside a request or before the
    telemetry middleware has run.
    """
    return _request_logger.get()


def get_request_logger_or_default(
    default: structlog.stdlib.BoundLogger,
) -> structlog.stdlib.BoundLogger:
    """Return the request logger, falling back to ``default``."""
    logger = _request_logger.get()
    return logger if logger is not None else default


def bind_request_logger(
    logger: structlog.stdlib.BoundLogger,
) -> Token[structlog.stdlib.BoundLogger | None]:
    """Attach ``logger`` to the current context, shadowing any previous one."""
    return _request_logger.set(logger)


def reset_request_logger(token: Token[structlog.stdlib.BoundLogger | None]) -> None:
    """Restore whatever logger was attached before ``bind_request_logger``."""
    _request_logger.reset(token)


def attach_scope_logger(scope: MutableMapping[str, Any], logger: structlog.stdlib.BoundLogger) -> None:
    """Store ``logger`` in the ASGI scope state of the current request.

    Outer middleware that runs after the ContextVar has been reset (for
    example while an exception unwinds) reads it from here.
    """
    scope.setdefault("state", {})[_SCOPE_LOGGER_KEY] = logger


def get_scope_logger(scope: Mapping[str, Any]) -> structlog.stdlib.BoundLogger | None:
    return scope.get("state", {}).get(_SCOPE_LOGGER_KEY)


@contextmanager
def request_logger(logger: structlog.stdlib.BoundLogger) -> Iterator[structlog.stdlib.BoundLogger]:
    """Attach ``logger`` for the duration of the block.

    Example:
        >>> with request_logger(log.bind(request_id="abc")):
        ...     get_request_logger().info("handled")
    """
    token = bind_request_logger(logger)
    try:
        yield logger
    finally:
        reset_request_logger(token)
