"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any, cast

import pytest
from pytest_mock import MockerFixture, MockType
from starlette.requests import Request

from src.core.config import Settings, get_settings
from src.core.context import RequestContext


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings object with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")

    return Settings()


@pytest.fixture
def mock_app(mocker: MockerFixture) -> MockType:
    """Provide a mock ASGI app for middleware construction.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: Mock ASGI app.
    """
    return cast("MockType", mocker.AsyncMock())


@pytest.fixture
def make_request() -> Any:
    """Build bare Starlette requests for calling handlers directly.

    Returns:
        Callable building a Request from method, path and headers.
    """

    def _make(
        method: str = "GET",
        path: str = "/api/v1/members",
        headers: dict[str, str] | None = None,
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [
                (key.lower().encode(), value.encode())
                for key, value in (headers or {}).items()
            ],
            "server": ("testserver", 80),
            "client": ("testclient", 12345),
            "asgi": {"version": "3.0"},
            "scheme": "http",
            "root_path": "",
        }
        return Request(scope)

    return _make


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Backup and restore environment variables to prevent test interference.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "SECURITY_CONFIG__",
        "ROUTING_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()
