"""Response envelope builder.

Turns an Outcome into the top-level JSON structure sent to the client:

- success: ``{"<resource key>": <payload>}``
- failure: ``{"errors": {"<field>": ["<message>", ...]}}``
- no content: empty body

The payload is wrapped as-is. Any nesting or denormalization is the
handler's business; the builder only adds the top-level key. Success and
error shapes never share an envelope, so ``errors`` cannot be used as a
resource key.
"""

import copy
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from src.core.exceptions import ConfigurationError
from src.core.types import FieldErrors, FieldErrorsInput
from src.domain.outcomes import (
    Created,
    MessageFailure,
    NoContent,
    Outcome,
    Success,
    ValidationFailure,
)
from src.domain.status_policy import classify

ERRORS_KEY = "errors"
BASE_FIELD = "base"


class EnvelopeKind(Enum):
    """Which of the three wire shapes an envelope has."""

    SUCCESS = "success"
    ERROR = "error"
    EMPTY = "empty"


class Envelope(BaseModel):
    """An immutable, fully-built response body.

    Two envelopes built from equal inputs compare equal.
    """

    model_config = ConfigDict(frozen=True)

    kind: EnvelopeKind
    body: dict[str, Any]

    @property
    def is_empty(self) -> bool:
        """Whether the response carries no body at all."""
        return self.kind is EnvelopeKind.EMPTY

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the body, safe for the caller to mutate."""
        return copy.deepcopy(self.body)


def _check_resource_key(resource_key: str, outcome: Outcome) -> None:
    if not isinstance(resource_key, str) or not resource_key.strip():
        raise ConfigurationError(
            f"{type(outcome).__name__} outcomes need a non-empty resource key",
            context={"resource_key": resource_key},
        )
    if resource_key == ERRORS_KEY:
        raise ConfigurationError(
            f"'{ERRORS_KEY}' is reserved for error envelopes",
            context={"resource_key": resource_key},
        )


def error_envelope(errors: FieldErrorsInput) -> Envelope:
    """Build an error envelope straight from a field-error mapping.

    Args:
        errors: Field name -> messages, in the order they should appear.

    Returns:
        Envelope: ``{"errors": {...}}`` with fields and messages in input order.
    """
    field_errors: FieldErrors = {
        field: [messages] if isinstance(messages, str) else list(messages)
        for field, messages in errors.items()
    }
    return Envelope(kind=EnvelopeKind.ERROR, body={ERRORS_KEY: field_errors})


def build(outcome: Outcome, resource_key: str) -> Envelope:
    """Shape an outcome into its response envelope.

    Args:
        outcome: The handler's outcome.
        resource_key: Top-level key for success payloads, e.g. ``"member"``.

    Returns:
        Envelope: The built envelope.

    Raises:
        ConfigurationError: If a success outcome has no usable resource key.

    Examples:
        >>> build(ValidationFailure({"email": ["is invalid"]}), "member").body
        {'errors': {'email': ['is invalid']}}
    """
    if isinstance(outcome, NoContent):
        return Envelope(kind=EnvelopeKind.EMPTY, body={})

    if isinstance(outcome, (Success, Created)):
        _check_resource_key(resource_key, outcome)
        return Envelope(
            kind=EnvelopeKind.SUCCESS,
            body={resource_key: copy.deepcopy(outcome.payload)},
        )

    if isinstance(outcome, ValidationFailure):
        return error_envelope(outcome.errors)

    if isinstance(outcome, MessageFailure):
        message = outcome.message or classify(outcome).reason.replace("_", " ")
        return error_envelope({BASE_FIELD: [message]})

    raise ConfigurationError(
        f"Unsupported outcome type {type(outcome).__name__}",
        context={"outcome_type": type(outcome).__name__},
    )
