"""
Configuration loader — reads config.yml into a Settings model.

The file is optional. When it is absent every field keeps its
default, so a fresh machine works without any setup.

Lookup order:
    --config flag  >  DOTSYNC_CONFIG env var  >  $XDG_CONFIG_HOME/dotsync/config.yml
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from dotsync.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""


def default_config_path() -> Path:
    """Where config.yml lives when no explicit path is given."""
    env = os.environ.get("DOTSYNC_CONFIG")
    if env:
        return Path(env).expanduser()

    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "dotsync" / CONFIG_FILE


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file. If given it must exist.
            If None, the default location is used when present.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If the file is missing (explicit path only),
            unreadable, or invalid.
    """
    explicit = path is not None
    if path is None:
        path = default_config_path()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug("No config file at %s, using defaults", path)
        return Settings()

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s", path)
    return settings
