"""Shared fixtures for integration tests.

Builds a small versioned API on top of create_app and serves it through
httpx without a network socket.
"""

from collections.abc import AsyncGenerator, Generator
from datetime import UTC, date, datetime
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.dispatch import ResourceRequest
from src.api.main import create_app
from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.dates import Granularity, normalize, normalize_fields, parse
from src.core.exceptions import InvalidTimestampError
from src.core.logging import _state
from src.domain.outcomes import (
    Created,
    NoContent,
    NotFound,
    Outcome,
    Success,
    ValidationFailure,
)
from src.domain.routing import ResourceCapability, RouteNamespace, VersionRouter

DATE_FIELDS = {
    "born_on": Granularity.DATE_ONLY,
    "joined_at": Granularity.DATE_TIME,
}

MEMBERS: dict[str, dict[str, Any]] = {
    "1": {
        "id": 1,
        "name": "Ada",
        "born_on": date(1815, 12, 10),
        "joined_at": datetime(2024, 1, 15, 9, 30, 5, 123456, tzinfo=UTC),
    },
}


def list_members(_request: ResourceRequest) -> Outcome:
    return Success([normalize_fields(m, DATE_FIELDS) for m in MEMBERS.values()])


def show_member(request: ResourceRequest) -> Outcome:
    member = MEMBERS.get(request.resource_id or "")
    if member is None:
        return NotFound(f"Member {request.resource_id} does not exist")
    return Success(normalize_fields(member, DATE_FIELDS))


async def create_member(request: ResourceRequest) -> Outcome:
    body = request.body if isinstance(request.body, dict) else {}

    pairs: list[tuple[str, str]] = []
    if not body.get("name"):
        pairs.append(("name", "can't be blank"))
    if "@" not in str(body.get("email", "")):
        pairs.append(("email", "is invalid"))
    if pairs:
        return ValidationFailure.from_pairs(pairs)

    try:
        born_on = parse(body["born_on"], Granularity.DATE_ONLY)
    except InvalidTimestampError as e:
        raise InvalidTimestampError(e.message, field="born_on", cause=e) from e

    return Created(
        {
            "id": 2,
            "name": body["name"],
            "born_on": normalize(born_on, Granularity.DATE_ONLY),
        }
    )


def update_member(request: ResourceRequest) -> Outcome:
    body = request.body if isinstance(request.body, dict) else {}
    return Success({"id": int(request.resource_id or 0), **body})


def destroy_member(_request: ResourceRequest) -> Outcome:
    return NoContent()


def list_members_v2(_request: ResourceRequest) -> Outcome:
    return Success(
        {"items": [{"id": m["id"]} for m in MEMBERS.values()], "total": len(MEMBERS)}
    )


def unstamped_event(_request: ResourceRequest) -> Outcome:
    # Naive datetime without assume_utc
    return Success(
        normalize_fields(
            {"id": 1, "starts_at": datetime(2024, 1, 15, 9, 30)},
            {"starts_at": Granularity.DATE_TIME},
        )
    )


def _explode(_request: ResourceRequest) -> Outcome:
    raise RuntimeError("database exploded")


def build_router() -> VersionRouter:
    v1 = RouteNamespace("api", "v1")
    router = VersionRouter()
    router.register_many(
        [
            (
                v1,
                "members",
                ResourceCapability(
                    index=list_members,
                    show=show_member,
                    create=create_member,
                    update=update_member,
                    destroy=destroy_member,
                    resource_key="member",
                ),
            ),
            (v1, "events", ResourceCapability(show=unstamped_event)),
            (v1, "reports", ResourceCapability(index=lambda _request: {"raw": 1})),
            (v1, "crashes", ResourceCapability(index=_explode)),
            (
                RouteNamespace("api", "v2"),
                "members",
                ResourceCapability(index=list_members_v2),
            ),
        ]
    )
    return router


@pytest.fixture(autouse=True)
def isolated_state() -> Generator[None]:
    """Keep settings, logging and request context from leaking between tests."""
    get_settings.cache_clear()
    RequestContext.clear()
    previous = _state.configured
    # Leave Loguru sinks alone so log_records keeps working
    _state.configured = True
    yield
    _state.configured = previous
    RequestContext.clear()
    get_settings.cache_clear()


@pytest.fixture
def router() -> VersionRouter:
    return build_router()


@pytest.fixture
def app(router: VersionRouter) -> FastAPI:
    return create_app(router, Settings())


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the test application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://testserver") as ac:
        yield ac
