"""Fixtures for API tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from telemetry_tracker.api.app import create_app
from telemetry_tracker.config.settings import Settings
from telemetry_tracker.observability.provider import ObservabilityProvider
from telemetry_tracker.storage.errors import WriteError
from telemetry_tracker.storage.inmemory import InMemoryEventStore
from telemetry_tracker.storage.models import Event


class FailingEventStore(InMemoryEventStore):
    """Store whose writes always fail."""

    async def store(self, event: Event) -> None:
        raise WriteError("unable to insert event: connection reset", cause=OSError("reset"))


@pytest.fixture
def settings() -> Settings:
    return Settings(storage={"backend": "memory"})


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def app(settings: Settings, provider: ObservabilityProvider, store: InMemoryEventStore) -> FastAPI:
    return create_app(settings, provider, store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def failing_client(settings: Settings, provider: ObservabilityProvider) -> TestClient:
    return TestClient(create_app(settings, provider, FailingEventStore()))
