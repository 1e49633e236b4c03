"""Metrics registry for telemetry-tracker.

Named counters and histograms created from the provider's OpenTelemetry
meter. Recording is in-memory aggregation inside the SDK and is safe for
concurrent callers; export happens on the meter provider's own schedule.
"""

from opentelemetry.metrics import Counter, Histogram, Meter

NAMESPACE = "telemetry_tracker"

# Request duration buckets in seconds: .005 .. 10
DURATION_BUCKETS: tuple[float, ...] = (
    0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0,
)

# Response size buckets in bytes: 100B .. 10MB
SIZE_BUCKETS: tuple[float, ...] = tuple(100.0 * 10**i for i in range(6))


class MetricsRegistry:
    """Process-wide set of domain and HTTP instruments.

    Every method records exactly one increment or one observation per call.
    HTTP instruments are labelled with ``method`` and ``status``; the
    events-received counter is labelled with ``event_type``.
    """

    def __init__(self, meter: Meter) -> None:
        self.events_received: Counter = meter.create_counter(
            f"{NAMESPACE}_events_received_total",
            unit="1",
            description="Total number of events received via the HTTP endpoint.",
        )
        self.events_stored: Counter = meter.create_counter(
            f"{NAMESPACE}_events_stored_total",
            unit="1",
            description="Total number of events successfully stored in the database.",
        )
        self.database_errors: Counter = meter.create_counter(
            f"{NAMESPACE}_database_errors_total",
            unit="1",
            description="Total number of database errors encountered during storage.",
        )
        self.http_requests: Counter = meter.create_counter(
            f"{NAMESPACE}_http_requests_total",
            unit="1",
            description="Total number of HTTP requests processed.",
        )
        self.request_duration: Histogram = meter.create_histogram(
            f"{NAMESPACE}_http_request_duration_seconds",
            unit="s",
            description="Histogram of HTTP request durations in seconds.",
            explicit_bucket_boundaries_advisory=list(DURATION_BUCKETS),
        )
        self.response_size: Histogram = meter.create_histogram(
            f"{NAMESPACE}_http_response_size_bytes",
            unit="By",
            description="Histogram of HTTP response sizes in bytes.",
            explicit_bucket_boundaries_advisory=list(SIZE_BUCKETS),
        )

    # Domain metrics

    def record_event_received(self, event_type: str) -> None:
        self.events_received.add(1, {"event_type": event_type})

    def record_event_stored(self) -> None:
        self.events_stored.add(1)

    def record_database_error(self) -> None:
        self.database_errors.add(1)

    # HTTP metrics

    def record_http_request(self, method: str, status: int) -> None:
        self.http_requests.add(1, _http_labels(method, status))

    def observe_request_duration(self, method: str, status: int, seconds: float) -> None:
        self.request_duration.record(seconds, _http_labels(method, status))

    def observe_response_size(self, method: str, status: int, size_bytes: int) -> None:
        self.response_size.record(size_bytes, _http_labels(method, status))


def _http_labels(method: str, status: int) -> dict[str, str]:
    return {"method": method, "status": str(status)}
