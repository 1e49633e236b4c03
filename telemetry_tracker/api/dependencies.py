"""Dependency injection for API routes.

The provider, metrics registry and event store are created once by
``create_app`` and kept on ``app.state``. Routes receive them through the
``*Dep`` aliases below, which tests can override with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from telemetry_tracker.observability.metrics import MetricsRegistry
from telemetry_tracker.observability.provider import ObservabilityProvider
from telemetry_tracker.storage.store import EventStore


def get_provider(request: Request) -> ObservabilityProvider:
    return request.app.state.provider


def get_metrics(request: Request) -> MetricsRegistry:
    return request.app.state.metrics


def get_event_store(request: Request) -> EventStore:
    return request.app.state.store


ProviderDep = Annotated[ObservabilityProvider, Depends(get_provider)]
MetricsDep = Annotated[MetricsRegistry, Depends(get_metrics)]
EventStoreDep = Annotated[EventStore, Depends(get_event_store)]
