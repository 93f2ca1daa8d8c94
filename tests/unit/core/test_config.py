"""Unit tests for src.core.config module."""

import pytest
from pydantic import ValidationError

from src.core.config import (
    LogConfig,
    RoutingConfig,
    SecurityConfig,
    Settings,
    get_settings,
)
from src.core.constants import DEFAULT_HSTS_MAX_AGE


@pytest.mark.unit
class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self) -> None:
        """Test the built-in defaults."""
        settings = Settings()

        assert settings.app_name == "Guidepost"
        assert settings.app_version == "0.1.0"
        assert settings.environment == "development"
        assert settings.debug is True
        assert settings.log_config.log_level == "INFO"
        assert settings.routing_config.allow_trailing_slash is True

    def test_environment_variables(self, mock_settings: Settings) -> None:
        """Test that top-level values come from the environment."""
        assert mock_settings.app_name == "TestApp"
        assert mock_settings.app_version == "1.0.0"
        assert mock_settings.debug is False

    def test_nested_environment_variables(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the __ delimiter for nested configuration."""
        monkeypatch.setenv("LOG_CONFIG__LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SECURITY_CONFIG__HSTS_PRELOAD", "true")
        monkeypatch.setenv("ROUTING_CONFIG__ALLOW_TRAILING_SLASH", "false")

        settings = Settings()

        assert settings.log_config.log_level == "DEBUG"
        assert settings.security_config.hsts_preload is True
        assert settings.routing_config.allow_trailing_slash is False

    def test_invalid_environment_rejected(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that unknown environments fail validation."""
        monkeypatch.setenv("ENVIRONMENT", "qa")

        with pytest.raises(ValidationError):
            Settings()

    @pytest.mark.parametrize(
        ("environment", "formatter"),
        [
            ("development", "console"),
            ("staging", "json"),
            ("production", "json"),
        ],
    )
    def test_formatter_follows_environment(
        self,
        monkeypatch: pytest.MonkeyPatch,
        environment: str,
        formatter: str,
    ) -> None:
        """Test that the log formatter is picked per environment."""
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert Settings().log_config.log_formatter_type == formatter

    def test_explicit_formatter_kept(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an explicit formatter wins over the environment default."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_CONFIG__LOG_FORMATTER_TYPE", "console")

        assert Settings().log_config.log_formatter_type == "console"

    def test_production_enforces_https(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that production always redirects plaintext requests."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("SECURITY_CONFIG__ENFORCE_HTTPS", "false")

        assert Settings().security_config.enforce_https is True

    def test_production_disables_debug(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that production never runs in debug mode."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")

        assert Settings().debug is False

    def test_development_does_not_enforce_https(self) -> None:
        """Test that local development serves plaintext by default."""
        assert Settings().security_config.enforce_https is False


@pytest.mark.unit
class TestNestedConfig:
    """Test cases for the nested configuration models."""

    def test_security_defaults(self) -> None:
        """Test HSTS defaults."""
        config = SecurityConfig()

        assert config.hsts_enabled is True
        assert config.hsts_max_age == DEFAULT_HSTS_MAX_AGE
        assert config.hsts_include_subdomains is True
        assert config.hsts_preload is False

    def test_negative_max_age_rejected(self) -> None:
        """Test that max-age cannot be negative."""
        with pytest.raises(ValidationError):
            SecurityConfig(hsts_max_age=-1)

    def test_invalid_log_level_rejected(self) -> None:
        """Test that only known levels are accepted."""
        with pytest.raises(ValidationError):
            LogConfig(log_level="VERBOSE")  # type: ignore[arg-type]

    def test_routing_defaults(self) -> None:
        """Test routing defaults."""
        assert RoutingConfig().allow_trailing_slash is True


@pytest.mark.unit
class TestGetSettings:
    """Test cases for get_settings."""

    def test_is_cached(self) -> None:
        """Test that the same instance is returned."""
        assert get_settings() is get_settings()

    def test_cache_clear_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that clearing the cache picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("APP_NAME", "Renamed")
        get_settings.cache_clear()

        assert get_settings() is not first
        assert get_settings().app_name == "Renamed"
