"""Configuration loading for telemetry-tracker.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from telemetry_tracker.config import get_settings

    settings = get_settings()
    port = settings.api.port
"""

from functools import lru_cache

from telemetry_tracker.config.settings import Settings
from telemetry_tracker.config.sources import require_default_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process settings, loading them on first use.

    Call `get_settings.cache_clear()` to reload configuration.

    Raises:
        FileNotFoundError: If config/default.toml is missing
    """
    require_default_config()
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
