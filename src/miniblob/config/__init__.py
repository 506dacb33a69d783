"""Configuration Module for MiniBlob

Typed configuration with .env and environment variable support.

Example:
    from miniblob.config import Settings, get_settings

    settings = Settings.from_env(overrides={"MINIBLOB_ROOT_PATH": "/srv/blobs"})
    settings.validate()
"""

from miniblob.config.env_loader import EnvLoader
from miniblob.config.settings import (
    DEFAULT_PREFIX,
    AuthSettings,
    IndexSettings,
    LogSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "DEFAULT_PREFIX",
    "EnvLoader",
    "ServerSettings",
    "AuthSettings",
    "StorageSettings",
    "IndexSettings",
    "LogSettings",
    "Settings",
    "get_settings",
    "reset_settings",
]
