# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Gateway configuration using pydantic-settings.

All environment-based configuration flows through this module.

Usage:
    from herald.core.config import get_settings
    settings = get_settings()

    if settings.discord_enabled:
        ...

Every field can be set with a ``HERALD_`` prefixed variable. The options the
gateway has always recognized (``DISCORD_BOT_TOKEN``, ``AUTH_TOKEN``,
``SUPABASE_URL``, ``SUPABASE_SERVICE_KEY``, ``PORT``) are also read under
their bare names.
"""

from __future__ import annotations

import logging
import secrets
from importlib.metadata import PackageNotFoundError, version

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigException

logger = logging.getLogger(__name__)

MIN_AUTH_TOKEN_LENGTH = 16


def get_package_version() -> str:
    """Get the package version from installed metadata.

    Returns a dev fallback when running from source without install.
    """
    try:
        return version("herald-gateway")
    except PackageNotFoundError:
        return "0.0.0-dev"


class GatewaySettings(BaseSettings):
    """Configuration for the Herald gateway."""

    model_config = SettingsConfigDict(
        env_prefix="HERALD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # CONNECTOR CREDENTIALS
    # ==========================================================================

    discord_bot_token: str | None = Field(
        default=None,
        description="Discord bot token. Without it every chat operation reports not connected.",
        validation_alias=AliasChoices("HERALD_DISCORD_BOT_TOKEN", "DISCORD_BOT_TOKEN"),
    )
    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL",
        validation_alias=AliasChoices("HERALD_SUPABASE_URL", "SUPABASE_URL"),
    )
    supabase_service_key: str | None = Field(
        default=None,
        description="Supabase service role key",
        validation_alias=AliasChoices("HERALD_SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_KEY"),
    )

    # ==========================================================================
    # HTTP SETTINGS
    # ==========================================================================

    auth_token: str | None = Field(
        default=None,
        description="Shared secret expected as 'Authorization: Bearer <secret>'",
        validation_alias=AliasChoices("HERALD_AUTH_TOKEN", "AUTH_TOKEN"),
    )
    host: str = Field(default="0.0.0.0", description="Host to bind to")  # nosec B104
    port: int = Field(
        default=8080,
        description="Port to bind to",
        validation_alias=AliasChoices("HERALD_PORT", "PORT"),
    )
    public_url: str | None = Field(
        default=None,
        description="Externally reachable URL, logged at startup",
    )
    documentation_url: str | None = Field(
        default=None,
        description="Link reported by the root endpoint",
    )
    allowed_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    # Streaming
    heartbeat_interval: float = Field(
        default=30.0,
        description="Seconds between heartbeat frames on an event stream",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field(default="", description="Log format: 'json', 'text', or '' (auto-detect)")
    log_file: str | None = Field(default=None, description="Optional log file path")

    # Identity
    server_name: str = Field(default="herald", description="Service name reported to clients")
    server_version: str = Field(default_factory=get_package_version, description="Server version")

    @field_validator("heartbeat_interval")
    @classmethod
    def validate_heartbeat_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("heartbeat_interval must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_auth_token(self) -> GatewaySettings:
        """Require a usable shared secret.

        A configured secret must be long enough to resist guessing. When none is
        configured a random one is generated, which locks every authenticated
        endpoint until an operator sets HERALD_AUTH_TOKEN.
        """
        if self.auth_token:
            if len(self.auth_token) < MIN_AUTH_TOKEN_LENGTH:
                raise ValueError(
                    f"HERALD_AUTH_TOKEN must be at least {MIN_AUTH_TOKEN_LENGTH} characters. "
                    "Generate one with: herald generate-secret"
                )
        else:
            logger.warning("No AUTH_TOKEN configured - generated a random secret, authenticated endpoints are locked")
            object.__setattr__(self, "auth_token", secrets.token_urlsafe(32))

        return self

    @property
    def discord_enabled(self) -> bool:
        """Whether a Discord bot token is configured."""
        return bool(self.discord_bot_token)

    @property
    def supabase_enabled(self) -> bool:
        """Whether both Supabase URL and service key are configured."""
        return bool(self.supabase_url and self.supabase_service_key)


# Global settings instance - lazy loaded
_settings: GatewaySettings | None = None


def get_settings() -> GatewaySettings:
    """Get the global settings instance.

    Raises:
        ConfigException: If the environment holds invalid settings
    """
    global _settings
    if _settings is None:
        try:
            _settings = GatewaySettings()
        except ValidationError as e:
            raise ConfigException(f"Invalid gateway configuration: {e}") from e
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    global _settings
    _settings = None
