"""Locating the TOML files that feed Settings.

Two files apply, lowest priority first:
    config/default.toml
    config/{TELEMETRY_TRACKER_ENV}.toml

Each existing file becomes one pydantic-settings ``TomlConfigSettingsSource``.
pydantic-settings deep-merges the sources, so an environment file only
needs the keys it changes.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, TomlConfigSettingsSource

CONFIG_DIR_ENV = "TELEMETRY_TRACKER_CONFIG_DIR"
ENVIRONMENT_ENV = "TELEMETRY_TRACKER_ENV"

DEFAULT_ENVIRONMENT = "development"
DEFAULT_CONFIG_FILE = "default.toml"

# How far above the working directory to look for config/
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    ``TELEMETRY_TRACKER_CONFIG_DIR`` wins and must exist. Otherwise the
    nearest ``config/`` at or above the working directory is used.
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_ENV} points at a missing directory: {path}")
        return path

    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        if (directory / "config").is_dir():
            return directory / "config"
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def config_files(config_dir: Path | None = None) -> list[Path]:
    """Candidate files for the current environment, lowest priority first."""
    config_dir = config_dir or get_config_dir()
    files = [config_dir / DEFAULT_CONFIG_FILE]
    env_file = config_dir / f"{get_environment()}.toml"
    if env_file not in files:
        files.append(env_file)
    return files


def require_default_config(config_dir: Path | None = None) -> Path:
    """Path of default.toml, which a running service cannot do without.

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    path = (config_dir or get_config_dir()) / DEFAULT_CONFIG_FILE
    if not path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {path}. "
            f"Create config/{DEFAULT_CONFIG_FILE} or set {CONFIG_DIR_ENV}."
        )
    return path


def toml_sources(settings_cls: type[BaseSettings]) -> tuple[TomlConfigSettingsSource, ...]:
    """One source per existing file, highest priority first.

    Raises:
        tomllib.TOMLDecodeError: If a file is not valid TOML
    """
    return tuple(
        TomlConfigSettingsSource(settings_cls, toml_file=path)
        for path in reversed(config_files())
        if path.is_file()
    )
