"""FastAPI application factory.

Creates and configures the FastAPI application with the telemetry
middleware pipeline, exception handlers and route registration.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from telemetry_tracker.api.exceptions import TelemetryAPIError
from telemetry_tracker.api.middleware import install_middleware
from telemetry_tracker.api.models.errors import error_payload
from telemetry_tracker.api.routes import register_routes
from telemetry_tracker.config.settings import Settings
from telemetry_tracker.observability.context import get_request_logger_or_default
from telemetry_tracker.observability.metrics import MetricsRegistry
from telemetry_tracker.observability.provider import ObservabilityProvider, ShutdownError
from telemetry_tracker.storage.store import EventStore


def create_app(
    settings: Settings,
    provider: ObservabilityProvider,
    store: EventStore,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The provider, a metrics registry built from its meter, and the store
    are kept on ``app.state``. The lifespan connects the store on startup
    and, on shutdown, closes it and then drains the provider.

    Args:
        settings: Application settings
        provider: Observability provider created at process start
        store: Event store; connected and closed by the lifespan

    Returns:
        Configured FastAPI application
    """
    logger = provider.logger

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await store.connect()
        logger.info("app_started", app_name=settings.app_name, mode=settings.observability.mode)

        yield

        await store.close()
        try:
            # Exporter drains block; keep the event loop free
            await asyncio.to_thread(
                provider.shutdown, settings.observability.shutdown_timeout_seconds
            )
        except ShutdownError as eg:
            logger.error(
                "observability_shutdown_failed",
                errors=[repr(e) for e in eg.exceptions],
            )
        else:
            logger.info("app_stopped")

    app = FastAPI(
        title="Telemetry Tracker",
        description="Telemetry event ingestion service",
        version=settings.observability.service_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
    )

    metrics = MetricsRegistry(provider.meter)
    app.state.settings = settings
    app.state.provider = provider
    app.state.metrics = metrics
    app.state.store = store

    _register_exception_handlers(app, provider)
    register_routes(app)
    install_middleware(app, provider, metrics, settings.api)

    logger.debug("app_created", debug=settings.debug)

    return app


def _register_exception_handlers(app: FastAPI, provider: ObservabilityProvider) -> None:
    """Register handlers for the API exception hierarchy.

    Anything else propagates to the panic recovery middleware.
    """

    @app.exception_handler(TelemetryAPIError)
    async def telemetry_api_error_handler(
        request: Request, exc: TelemetryAPIError
    ) -> JSONResponse:
        """Handle TelemetryAPIError and its subclasses."""
        log = get_request_logger_or_default(provider.logger)
        log.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            status=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(exc.error_code, exc.message),
        )
