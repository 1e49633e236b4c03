"""Event ingestion endpoint."""

from fastapi import APIRouter, Request, status
from pydantic import ValidationError

from telemetry_tracker.api.dependencies import EventStoreDep, MetricsDep, ProviderDep
from telemetry_tracker.api.exceptions import (
    InvalidRequestError,
    StorageUnavailableError,
    UnsupportedMediaTypeError,
)
from telemetry_tracker.observability.context import get_request_logger_or_default
from telemetry_tracker.observability.tracing import (
    add_span_event,
    create_span,
    get_current_span_id,
    get_current_trace_id,
    record_exception,
)
from telemetry_tracker.storage.errors import StoreError
from telemetry_tracker.storage.models import Event

router = APIRouter()

JSON_MEDIA_TYPE = "application/json"


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def ingest_event(
    request: Request,
    provider: ProviderDep,
    metrics: MetricsDep,
    store: EventStoreDep,
) -> dict[str, str]:
    """Validate and persist a single telemetry event.

    Returns 202 once the event is stored.

    Raises:
        UnsupportedMediaTypeError: Content-Type is not application/json
        InvalidRequestError: Body is not valid JSON or not a valid event
        StorageUnavailableError: The store rejected the write
    """
    log = get_request_logger_or_default(provider.logger)

    if not _is_json(request.headers.get("content-type", "")):
        raise UnsupportedMediaTypeError("Content-Type must be application/json")

    body = await request.body()
    try:
        event = Event.model_validate_json(body)
    except ValidationError as exc:
        log.warning("event_rejected", error_count=exc.error_count())
        raise InvalidRequestError("Invalid event payload") from exc

    metrics.record_event_received(event.event_type)

    with create_span(
        provider.tracer,
        "store_event",
        attributes={"event.type": event.event_type},
    ) as span:
        store_error: StoreError | None = None
        try:
            await store.store(event)
        except StoreError as exc:
            store_error = exc
            record_exception(span, exc, "failed to store event")
            log = log.bind(trace_id=get_current_trace_id(), span_id=get_current_span_id())

    if store_error is not None:
        metrics.record_database_error()
        log.error(
            "event_store_failed",
            event_type=event.event_type,
            error=str(store_error),
            error_type=type(store_error).__name__,
        )
        raise StorageUnavailableError("Failed to store event") from store_error

    metrics.record_event_stored()
    add_span_event("event_stored", {"event.type": event.event_type})
    log.info("event_stored", event_type=event.event_type)

    return {"status": "accepted"}
