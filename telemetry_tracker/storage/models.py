"""Event model accepted by the ingestion endpoint and persisted by stores."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Event(BaseModel):
    """A single telemetry event.

    Unknown fields are rejected. ``timestamp`` is normalised to UTC and
    defaults to the time of receipt.
    """

    model_config = ConfigDict(extra="forbid")

    event_type: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: Any = None

    @field_validator("timestamp")
    @classmethod
    def normalise_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)
