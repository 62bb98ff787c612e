"""
Configuration management for the provision tracker.

This module reads the tracker backend selection and store location from
environment variables using Pydantic Settings. The docker-link variables
(``AUTODB_ENV_REDIS_VERSION`` / ``AUTODB_PORT``) set when a container is
linked to a Redis container under the ``autodb`` alias are honoured too.
"""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class TrackerBackend(str, Enum):
    """Storage backends available for tracking provisioning status."""

    AUTO = "auto"
    MEMORY = "memory"
    REDIS = "redis"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tracker configuration
    tracker_backend: str = Field(
        default="auto", description="Tracker backend: auto, memory, redis"
    )
    redis_url: str = Field(default="", description="Redis URL for the redis backend")
    redis_socket_timeout: float | None = Field(
        default=None, description="Redis socket timeout in seconds"
    )

    # Docker link environment
    autodb_env_redis_version: str = Field(
        default="", description="Set by docker when linked to a redis container"
    )
    autodb_port: str = Field(
        default="", description="Linked redis address (e.g. tcp://172.17.0.5:6379)"
    )

    # Logging configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format")

    @field_validator("tracker_backend")
    @classmethod
    def validate_tracker_backend(cls, v: str) -> str:
        """Validate tracker backend."""
        try:
            TrackerBackend(v)
        except ValueError as e:
            raise ValueError(f"Invalid tracker backend: {v}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}")
        return v

    @property
    def tracker_backend_enum(self) -> TrackerBackend:
        """Get the tracker backend as an enum."""
        return TrackerBackend(self.tracker_backend)

    @property
    def resolved_redis_url(self) -> str | None:
        """
        Get the Redis URL to connect to, if any.

        An explicit ``REDIS_URL`` wins. Otherwise, when a docker link to a
        redis container is present, its advertised port address is used.

        Raises:
            ConfigurationError: If a docker link is present without a port
        """
        if self.redis_url:
            return self.redis_url

        if self.autodb_env_redis_version:
            if not self.autodb_port:
                raise ConfigurationError(
                    "Linked to a redis container, but AUTODB_PORT is not defined",
                    context={"redis_version": self.autodb_env_redis_version},
                )
            return self.autodb_port

        return None


# Global settings instance - initialized lazily to avoid import-time errors
_settings_instance = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
