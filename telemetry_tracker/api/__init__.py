"""HTTP API layer for telemetry-tracker."""

from telemetry_tracker.api.app import create_app

__all__ = ["create_app"]
