"""Process entry point: ``python -m telemetry_tracker``."""

import sys

import uvicorn

from telemetry_tracker.api.app import create_app
from telemetry_tracker.config import get_settings
from telemetry_tracker.config.models.storage import StorageConfig
from telemetry_tracker.observability.provider import ObservabilityInitError, init_observability
from telemetry_tracker.storage import EventStore, InMemoryEventStore, PostgresEventStore


def create_store(config: StorageConfig) -> EventStore:
    """Build the event store selected by ``config.backend``."""
    if config.backend == "memory":
        return InMemoryEventStore()
    return PostgresEventStore(
        dsn=config.resolve_dsn(),
        min_size=config.min_pool_size,
        max_size=config.max_pool_size,
        command_timeout=config.command_timeout_seconds,
    )


def main() -> int:
    settings = get_settings()

    try:
        provider = init_observability(
            settings.observability.mode,
            settings.observability,
            log_format=settings.log_format,
            log_level=settings.log_level,
        )
    except ObservabilityInitError as exc:
        print(f"failed to initialize observability: {exc}", file=sys.stderr)
        return 1

    app = create_app(settings, provider, create_store(settings.storage))

    provider.logger.info(
        "server_starting",
        host=settings.api.host,
        port=settings.api.port,
        storage_backend=settings.storage.backend,
    )

    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        timeout_graceful_shutdown=int(settings.api.graceful_shutdown_seconds),
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
