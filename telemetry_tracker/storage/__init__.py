"""Event persistence."""

from telemetry_tracker.storage.errors import ConnectionError, StoreError, WriteError
from telemetry_tracker.storage.inmemory import InMemoryEventStore
from telemetry_tracker.storage.models import Event
from telemetry_tracker.storage.postgres import PostgresEventStore
from telemetry_tracker.storage.store import EventStore

__all__ = [
    "ConnectionError",
    "Event",
    "EventStore",
    "InMemoryEventStore",
    "PostgresEventStore",
    "StoreError",
    "WriteError",
]
