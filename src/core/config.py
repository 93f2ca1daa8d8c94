"""Centralized configuration management with environment-aware defaults.

This module implements the façade's configuration using Pydantic Settings,
providing type-safe values with validation and environment variable support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for nested config structures
- **Environment defaults**: Production disables debug and tightens transport
  security
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
4. Environment-based defaults (production vs development)
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.constants import DEFAULT_HSTS_MAX_AGE


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )


class SecurityConfig(BaseModel):
    """Transport security configuration.

    Conforming deployments only ever serve HTTPS; these settings control the
    headers and redirects the application adds to enforce that.
    """

    hsts_enabled: bool = Field(
        default=True,
        description="Send the Strict-Transport-Security header",
    )
    hsts_max_age: int = Field(
        default=DEFAULT_HSTS_MAX_AGE,
        ge=0,
        description="HSTS max-age in seconds",
    )
    hsts_include_subdomains: bool = Field(
        default=True,
        description="Add includeSubDomains to the HSTS header",
    )
    hsts_preload: bool = Field(
        default=False,
        description="Add preload to the HSTS header",
    )
    enforce_https: bool = Field(
        default=False,
        description="Redirect plaintext requests to HTTPS. Forced on in production.",
    )


class RoutingConfig(BaseModel):
    """Version router configuration."""

    allow_trailing_slash: bool = Field(
        default=True,
        description="Resolve '/api/v1/members/' the same as '/api/v1/members'",
    )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="Guidepost", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=True, description="Debug mode flag")

    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    security_config: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Transport security configuration"
    )

    routing_config: RoutingConfig = Field(
        default_factory=RoutingConfig, description="Version router configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment == "development" else "json"
            )

        if self.environment == "production":
            self.debug = False
            self.security_config.enforce_https = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
