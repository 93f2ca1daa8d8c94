"""JSON response classes that render envelopes with orjson.

EnvelopeResponse is the default response class for the whole application.
Unlike a sorted-key renderer it keeps dictionary insertion order, because
field order in error envelopes follows the order of the validation pass.

orjson natively serializes datetime, date, UUID and Decimal values, so
payloads that were not run through the date normalizer still render.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from src.domain.envelope import Envelope, build
from src.domain.outcomes import Outcome
from src.domain.status_policy import classify


class EnvelopeResponse(JSONResponse):
    """FastAPI response class using orjson, preserving key order.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: An Envelope, a Pydantic model, or plain JSON-compatible data.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, Envelope):
            content = content.body
        elif isinstance(content, BaseModel):
            content = content.model_dump(mode="json")

        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)


def envelope_response(
    envelope: Envelope,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> Response:
    """Wrap a built envelope in a response.

    Empty envelopes produce a response without a body or content type.
    """
    if envelope.is_empty:
        return Response(status_code=status_code, headers=headers)
    return EnvelopeResponse(content=envelope, status_code=status_code, headers=headers)


def outcome_response(
    outcome: Outcome,
    resource_key: str = "",
    headers: dict[str, str] | None = None,
) -> Response:
    """Classify and shape an outcome into the response the client receives.

    Args:
        outcome: The handler's outcome.
        resource_key: Top-level key for success payloads. Failure and
            NoContent outcomes do not need one.
        headers: Extra response headers.

    Returns:
        Response: The response with the policy status code.
    """
    status_code, _ = classify(outcome)
    return envelope_response(build(outcome, resource_key), status_code, headers)
