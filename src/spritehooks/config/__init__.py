"""Configuration module for spritehooks."""

from .logging import JSONFormatter, TextFormatter, configure_logging
from .settings import Settings, get_config, get_settings, webhook_secret_env_key

__all__ = [
    "Settings",
    "get_config",
    "get_settings",
    "webhook_secret_env_key",
    "configure_logging",
    "JSONFormatter",
    "TextFormatter",
]
