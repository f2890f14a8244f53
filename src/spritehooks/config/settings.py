"""Settings and configuration management."""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import ClassVar, Literal

from dotenv import dotenv_values
from pydantic import Field, PrivateAttr, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

DEFAULT_SPRITES_API_BASE = "https://api.sprites.dev/v1"

# Regex for ${ENV_VAR} placeholders in YAML values
_ENV_VAR_PLACEHOLDER_RE = re.compile(r"^\$\{[A-Z_][A-Z0-9_]*\}$")

# YAML config search paths (checked in order, first found wins)
_YAML_SEARCH_PATHS = [
    Path("spritehooks.yaml"),
    Path("config/spritehooks.yaml"),
    Path.home() / ".config" / "spritehooks" / "spritehooks.yaml",
]


def _find_yaml_config() -> Path | None:
    """Find the first spritehooks.yaml in search paths."""
    for path in _YAML_SEARCH_PATHS:
        if path.is_file():
            return path
    return None


def webhook_secret_env_key(source: str) -> str:
    """Environment variable holding the validation secret for a source."""
    return f"{source.upper()}_WEBHOOK_SECRET"


class Settings(BaseSettings):
    """Application settings.

    Priority chain: init kwargs > env vars > .env file > spritehooks.yaml > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Class-level cache for the resolved YAML path (not a pydantic field)
    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings source priority.

        Priority: init kwargs > env vars > .env file > spritehooks.yaml > file secrets > defaults
        """
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
        ]

        yaml_path = _find_yaml_config()
        cls._yaml_path = yaml_path
        if yaml_path:
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=yaml_path,
                    yaml_file_encoding="utf-8",
                )
            )

        sources.append(file_secret_settings)
        return tuple(sources)

    @model_validator(mode="before")
    @classmethod
    def _resolve_env_var_placeholders(cls, data: dict) -> dict:
        """Strip unresolved ${VAR} placeholders so they become None.

        YAML files may contain ${ENV_VAR} syntax for secrets. When the env var
        is not set, the raw placeholder string would pollute the field value.
        """
        if not isinstance(data, dict):
            return data
        for key, value in data.items():
            if isinstance(value, str) and _ENV_VAR_PLACEHOLDER_RE.match(value):
                data[key] = None
        return data

    # Sprites execution API
    sprites_token: str | None = Field(None, description="Bearer token for the Sprites API")
    sprites_api_base: str = Field(
        DEFAULT_SPRITES_API_BASE, description="Base URL of the Sprites API"
    )
    http_timeout: float = Field(30.0, description="Outbound HTTP timeout in seconds")

    # Webhook validation secrets keyed by source name. Environment variables
    # named <SOURCE>_WEBHOOK_SECRET take precedence over entries here.
    webhook_secrets: dict[str, str] = Field(
        default_factory=dict, description="Per-source webhook validation secrets"
    )
    webhook_rate_limit: str = Field(
        "120/minute", description="Rate limit applied to inbound webhooks per client IP"
    )

    # Admin
    admin_token: str | None = Field(None, description="Token required in X-Admin-Token")

    # Automation catalog
    catalog_backend: Literal["kv", "directory"] = Field(
        "kv", description="Where automations are stored: 'kv' or 'directory'"
    )
    automations_dir: Path = Field(
        Path("automations"), description="Directory of automation YAML files"
    )
    cf_account_id: str | None = Field(None, description="Cloudflare account ID")
    cf_api_token: str | None = Field(None, description="Cloudflare API token")
    cf_kv_namespace_id: str | None = Field(None, description="Cloudflare KV namespace ID")

    # Application Settings
    host: str = Field("0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(8080, description="Port for the HTTP server")
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("text", description="Log format: 'text' or 'json'")
    sanitize_logs: bool = Field(True, description="Sanitize sensitive data from logs")

    # <SOURCE>_WEBHOOK_SECRET lines from .env; not fields, so pydantic-settings drops them
    _dotenv_secrets: dict[str, str] = PrivateAttr(default_factory=dict)

    def webhook_secret(self, source: str) -> str | None:
        """Resolve the validation secret for a webhook source."""
        secret = os.environ.get(webhook_secret_env_key(source))
        if secret:
            return secret
        secret = self._dotenv_secrets.get(webhook_secret_env_key(source))
        if secret:
            return secret
        return self.webhook_secrets.get(source) or self.webhook_secrets.get(source.lower())

    def _load_dotenv_secrets(self) -> dict[str, str]:
        env_file = self.model_config.get("env_file")
        if not env_file or not Path(env_file).is_file():
            return {}
        return {
            key.upper(): value
            for key, value in dotenv_values(env_file).items()
            if value and key.upper().endswith("_WEBHOOK_SECRET")
        }

    @property
    def has_kv_config(self) -> bool:
        return bool(self.cf_account_id and self.cf_api_token and self.cf_kv_namespace_id)

    def model_post_init(self, __context) -> None:
        """Warn about configuration that will make dispatches fail."""
        self._dotenv_secrets = self._load_dotenv_secrets()
        if not self.sprites_token:
            logger.warning("SPRITES_TOKEN is not set; every dispatch will fail")
        if self.catalog_backend == "kv" and not self.has_kv_config:
            logger.warning(
                "Cloudflare KV catalog selected but CF_ACCOUNT_ID, CF_API_TOKEN "
                "or CF_KV_NAMESPACE_ID is missing"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Alias for CLI and other consumers that expect get_config()
get_config = get_settings
