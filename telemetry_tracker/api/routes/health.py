"""Health check and metrics endpoints."""

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from telemetry_tracker.api.dependencies import ProviderDep
from telemetry_tracker.observability.tracing import create_span

router = APIRouter()


@router.get("/healthz", response_class=PlainTextResponse)
async def health_check(provider: ProviderDep) -> PlainTextResponse:
    """Liveness check. Any other method on this path yields 405."""
    with create_span(provider.tracer, "health_check"):
        return PlainTextResponse("OK")


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus text exposition of the default registry."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
