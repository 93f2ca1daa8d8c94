"""Unit tests for src.core.context module."""

import asyncio
import uuid

import pytest

from src.core.context import RequestContext, generate_correlation_id


@pytest.mark.unit
class TestRequestContext:
    """Test cases for RequestContext."""

    def test_set_get_clear(self) -> None:
        """Test the correlation ID lifecycle."""
        assert RequestContext.get_correlation_id() is None

        RequestContext.set_correlation_id("abc-123")
        assert RequestContext.get_correlation_id() == "abc-123"

        RequestContext.clear()
        assert RequestContext.get_correlation_id() is None

    async def test_isolated_between_tasks(self) -> None:
        """Test that concurrent tasks each see their own ID."""

        async def worker(correlation_id: str) -> str | None:
            RequestContext.set_correlation_id(correlation_id)
            await asyncio.sleep(0)
            return RequestContext.get_correlation_id()

        results = await asyncio.gather(worker("first"), worker("second"))

        assert results == ["first", "second"]


@pytest.mark.unit
class TestGenerateCorrelationId:
    """Test cases for generate_correlation_id."""

    def test_is_uuid4(self) -> None:
        """Test that generated IDs are version 4 UUIDs."""
        assert uuid.UUID(generate_correlation_id()).version == 4

    def test_is_unique(self) -> None:
        """Test that IDs do not repeat."""
        assert len({generate_correlation_id() for _ in range(100)}) == 100
