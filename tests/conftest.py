"""Root conftest.py for the Guidepost test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import contextlib
from collections.abc import Generator
from typing import Any, cast

import pytest
from loguru import logger


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture Loguru records emitted during a test.

    Yields:
        list[dict[str, Any]]: The raw Loguru record of every message, in order.
    """
    records: list[dict[str, Any]] = []

    def sink(message: object) -> None:
        records.append(cast("Any", message).record)

    handler_id = logger.add(sink, level="DEBUG", format="{message}")
    yield records
    # setup_logging may already have removed every handler
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)
