"""API route registration."""

from fastapi import FastAPI

from telemetry_tracker.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    from telemetry_tracker.api.routes.events import router as events_router
    from telemetry_tracker.api.routes.health import router as health_router

    app.include_router(events_router, tags=["Events"])
    app.include_router(health_router, tags=["Health"])

    logger.debug("routes_registered", routes=["events", "healthz", "metrics"])
