"""Event storage configuration."""

import os
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator


def _dsn_from_env() -> str:
    """Build a PostgreSQL DSN from DATABASE_URL or the DB_* variables."""
    dsn = os.environ.get("DATABASE_URL")
    if dsn:
        return dsn

    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    user = os.environ.get("DB_USER", "postgres")
    password = os.environ.get("DB_PASSWORD", "")
    name = os.environ.get("DB_NAME", "telemetry")

    if not port.isdigit():
        raise ValueError(f"invalid DB_PORT: {port!r}")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


class StorageConfig(BaseModel):
    """Configuration for the event store backend."""

    backend: Literal["postgres", "memory"] = Field(
        default="postgres", description="Event store implementation"
    )
    dsn: str | None = Field(
        default=None,
        description="PostgreSQL connection string; falls back to DATABASE_URL / DB_*",
    )
    min_pool_size: int = Field(default=2, ge=0)
    max_pool_size: int = Field(default=15, ge=1)
    command_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("max_pool_size")
    @classmethod
    def check_pool_bounds(cls, v: int, info: ValidationInfo) -> int:
        min_size = info.data.get("min_pool_size", 0)
        if v < min_size:
            raise ValueError("max_pool_size must be >= min_pool_size")
        return v

    def resolve_dsn(self) -> str:
        """Return the configured DSN or one derived from the environment."""
        return self.dsn or _dsn_from_env()
