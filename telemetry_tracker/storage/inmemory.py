"""In-memory EventStore for development and testing."""

from telemetry_tracker.storage.models import Event


class InMemoryEventStore:
    """Keeps stored events in a list."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    async def store(self, event: Event) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None
