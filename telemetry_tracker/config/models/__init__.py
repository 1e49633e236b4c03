"""Nested configuration sections."""

from telemetry_tracker.config.models.api import APIConfig
from telemetry_tracker.config.models.observability import ObservabilityConfig, ObservabilityMode
from telemetry_tracker.config.models.storage import StorageConfig

__all__ = ["APIConfig", "ObservabilityConfig", "ObservabilityMode", "StorageConfig"]
