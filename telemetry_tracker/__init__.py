"""Telemetry Tracker: telemetry event ingestion with correlated observability."""

__version__ = "0.1.0"
