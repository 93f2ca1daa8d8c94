"""Bridge between FastAPI and the version router.

A single catch-all endpoint resolves every request through the
VersionRouter, decodes the JSON body, calls the matched capability handler
and renders the Outcome it returns through the status policy and the
envelope builder.

Handlers receive a ResourceRequest and may be plain functions or
coroutines. Anything they return other than an Outcome is a programming
error and surfaces as ConfigurationError.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import orjson
from fastapi import FastAPI, Request
from fastapi.responses import Response
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.api.constants import MALFORMED_JSON_MESSAGE, REQUEST_BODY_METHODS
from src.api.utils.responses import outcome_response
from src.core.exceptions import ConfigurationError
from src.domain.outcomes import BadRequest, Outcome
from src.domain.routing import ROUTABLE_METHODS, Action, RouteMatch, VersionRouter


class ResourceRequest(BaseModel):
    """What a capability handler sees of the HTTP request."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(..., description="HTTP method", examples=["GET"])
    path: str = Field(..., description="Request path", examples=["/api/v1/members/1"])
    namespace: str = Field(..., description="Matched URL prefix", examples=["/api/v1"])
    resource_name: str = Field(
        ..., description="Matched resource", examples=["members"]
    )
    action: Action = Field(..., description="Matched action")
    resource_id: str | None = Field(
        default=None, description="Member id for show/update/destroy", examples=["1"]
    )
    query: dict[str, str] = Field(default_factory=dict, description="Query parameters")
    body: Any = Field(default=None, description="Decoded JSON body, if any")


async def _read_body(request: Request) -> tuple[Any, bool]:
    if request.method not in REQUEST_BODY_METHODS:
        return None, True
    raw = await request.body()
    if not raw:
        return None, True
    try:
        return orjson.loads(raw), True
    except orjson.JSONDecodeError:
        return None, False


async def call_handler(match: RouteMatch, resource_request: ResourceRequest) -> Outcome:
    """Invoke a matched handler and check that it returned an Outcome.

    Raises:
        ConfigurationError: If the handler returns anything else.
    """
    result = match.handler(resource_request)
    if inspect.isawaitable(result):
        result = await result

    if not isinstance(result, Outcome):
        raise ConfigurationError(
            f"Handler for {match.namespace.prefix}/{match.resource_name}"
            f"#{match.action.value} returned {type(result).__name__}, not an Outcome",
            context={
                "namespace": match.namespace.prefix,
                "resource": match.resource_name,
                "action": match.action.value,
            },
        )
    return result


def make_dispatch_endpoint(
    router: VersionRouter,
) -> Callable[[Request], Awaitable[Response]]:
    """Build the catch-all endpoint bound to a router."""

    async def dispatch(request: Request) -> Response:
        # RouteNotFoundError propagates to the exception handlers
        match = router.resolve(request.url.path, request.method)

        body, ok = await _read_body(request)
        if not ok:
            return outcome_response(
                BadRequest(MALFORMED_JSON_MESSAGE), match.resource_key
            )

        resource_request = ResourceRequest(
            method=request.method,
            path=request.url.path,
            namespace=match.namespace.prefix,
            resource_name=match.resource_name,
            action=match.action,
            resource_id=match.resource_id,
            query=dict(request.query_params),
            body=body,
        )

        with logger.contextualize(
            namespace=match.namespace.prefix,
            resource=match.resource_name,
            action=match.action.value,
        ):
            outcome = await call_handler(match, resource_request)
            logger.debug("Handler returned {}", type(outcome).__name__)

        return outcome_response(outcome, match.resource_key)

    return dispatch


def mount_router(app: FastAPI, router: VersionRouter) -> None:
    """Route every request not handled by an earlier route through ``router``.

    Must be called after all other routes have been added to ``app``.
    """
    app.add_api_route(
        "/{path:path}",
        make_dispatch_endpoint(router),
        methods=list(ROUTABLE_METHODS),
        include_in_schema=False,
    )
