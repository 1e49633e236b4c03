"""Root settings model for telemetry-tracker configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from telemetry_tracker.config.models.api import APIConfig
from telemetry_tracker.config.models.observability import ObservabilityConfig
from telemetry_tracker.config.models.storage import StorageConfig
from telemetry_tracker.config.sources import toml_sources

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    """Service configuration.

    Later layers override earlier ones: model defaults, config/default.toml,
    config/{TELEMETRY_TRACKER_ENV}.toml, TELEMETRY_TRACKER_* environment
    variables (``__`` separates nested keys), constructor arguments.
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_TRACKER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="telemetry-tracker", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel | None = Field(
        default=None,
        description="Logging level; unset uses the observability mode's level",
    )
    log_format: LogFormat = Field(default="json", description="Log renderer")

    api: APIConfig = Field(default_factory=APIConfig, description="API server configuration")
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Event store configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Constructor arguments, then environment variables, then TOML files.

        Nested sections are merged across sources key by key.
        """
        return (init_settings, env_settings, *toml_sources(settings_cls))
