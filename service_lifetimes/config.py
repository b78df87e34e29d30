"""
Configuration management for SERVICE_LIFETIMES.

Settings are read from environment variables at startup and validated with
Pydantic. The container only consumes ServiceProviderOptions; everything
else configures the web host.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEVELOPMENT = "Development"
PRODUCTION = "Production"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _settings_error(error: ValidationError) -> ConfigurationError:
    """Translate the first settings validation failure to a ConfigurationError."""
    first = error.errors()[0]
    key = str(first["loc"][0]).upper() if first.get("loc") else None
    return ConfigurationError(
        f"Invalid settings: {first['msg']}",
        config_key=key,
        config_value=first.get("input"),
    )


class ServiceProviderOptions(BaseModel):
    """
    Options applied when the container is built.

    validate_scopes: Reject Scoped services consumed by Singletons.
    validate_on_build: Validate every registration when the container is
                       built instead of on first resolution.

    Scope validation costs a graph walk per service, so the recommended
    setting is both enabled in Development and both disabled in Production.
    """

    model_config = ConfigDict(frozen=True)

    validate_scopes: bool = False
    validate_on_build: bool = False

    @classmethod
    def for_environment(cls, environment: str) -> "ServiceProviderOptions":
        """Default options for a hosting environment name."""
        development = environment.strip().lower() == DEVELOPMENT.lower()
        return cls(validate_scopes=development, validate_on_build=development)


class AppSettings(BaseSettings):
    """
    Application settings.

    Usage:
        # Using environment variables
        settings = AppSettings.from_env()

        # Or direct values (tests)
        settings = AppSettings(environment="Production")

    Environment variables:
        APP_ENVIRONMENT: Hosting environment (default: Development)
        LOG_LEVEL: Root log level (default: INFO)
        VALIDATE_SCOPES: Override scope validation (default: per environment)
        VALIDATE_ON_BUILD: Override build-time validation (default: per environment)
        HOST / PORT: Bind address for the server (default: 127.0.0.1:8000)
    """

    model_config = SettingsConfigDict(
        populate_by_name=True,
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: str = Field(DEVELOPMENT, validation_alias="APP_ENVIRONMENT")
    log_level: str = "INFO"
    validate_scopes: Optional[bool] = None
    validate_on_build: Optional[bool] = None
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)

    @field_validator("environment")
    @classmethod
    def _check_environment(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("environment must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return value

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == DEVELOPMENT.lower()

    def provider_options(self) -> ServiceProviderOptions:
        """Container options for this environment, with explicit overrides applied."""
        defaults = ServiceProviderOptions.for_environment(self.environment)
        return ServiceProviderOptions(
            validate_scopes=(
                defaults.validate_scopes if self.validate_scopes is None else self.validate_scopes
            ),
            validate_on_build=(
                defaults.validate_on_build
                if self.validate_on_build is None
                else self.validate_on_build
            ),
        )

    def with_overrides(self, **overrides: Any) -> "AppSettings":
        """
        Copy of these settings with overrides applied and validated again.

        None values are ignored, so optional CLI flags can be passed through.

        Raises:
            ConfigurationError: If an override holds an invalid value
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        try:
            return type(self).model_validate({**self.model_dump(), **changes})
        except ValidationError as e:
            raise _settings_error(e) from e

    @classmethod
    def from_env(cls) -> "AppSettings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        try:
            return cls()
        except ValidationError as e:
            raise _settings_error(e) from e
