"""Configuration for toolbridge."""

from toolbridge.config.settings import (
    ClientSettings,
    ConfigError,
    ProviderSpec,
    get_config_file,
    load_settings,
)

__all__ = [
    "ClientSettings",
    "ConfigError",
    "ProviderSpec",
    "get_config_file",
    "load_settings",
]
