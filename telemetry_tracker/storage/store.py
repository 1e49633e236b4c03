"""EventStore interface."""

from typing import Protocol, runtime_checkable

from telemetry_tracker.storage.models import Event


@runtime_checkable
class EventStore(Protocol):
    """Persists one event per call.

    Implementations raise StoreError subclasses on failure and never retry
    on behalf of the caller. ``connect`` and ``close`` are called once each
    by the application lifespan.
    """

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def store(self, event: Event) -> None: ...
