"""Domain-level handler outcomes, prior to any HTTP translation.

An Outcome is what an application handler returns: a closed set of frozen
variants that the status policy and the envelope builder turn into a status
code and a JSON body. Variants validate their own invariants when they are
constructed, so an unrepresentable outcome never reaches the transport.

Variants:
- **Success** / **Created**: carry the payload to wrap under a resource key
- **NoContent**: carries nothing; passing a payload is a ConfigurationError
- **ValidationFailure**: field name -> ordered messages
- **BadRequest**, **Unauthorized**, **Forbidden**, **NotFound**: optional message
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.exceptions import ConfigurationError
from src.core.types import FieldErrors, FieldErrorsInput, Payload


class OutcomeKind(Enum):
    """Tag identifying each Outcome variant."""

    SUCCESS = "success"
    CREATED = "created"
    NO_CONTENT = "no_content"
    VALIDATION_FAILURE = "validation_failure"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"


class Outcome(BaseModel):
    """Base class for all outcome variants."""

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[OutcomeKind]

    @property
    def is_failure(self) -> bool:
        """Whether this outcome renders as an ``errors`` envelope."""
        return isinstance(self, (ValidationFailure, MessageFailure))


class _PayloadOutcome(Outcome):
    """Outcomes whose payload may be given positionally, e.g. ``Created({"id": 1})``."""

    def __init__(self, *args: Any, **data: Any) -> None:
        if args:
            (data["payload"],) = args
        super().__init__(**data)


class Success(_PayloadOutcome):
    """The request succeeded and returns a representation."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCESS

    payload: Payload = Field(..., description="Representation to wrap")


class Created(_PayloadOutcome):
    """A resource was created; the payload is its representation."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.CREATED

    payload: Payload = Field(..., description="Representation of the new resource")


class NoContent(_PayloadOutcome):
    """The request succeeded and has nothing to return.

    Only ``None`` and the empty containers ``{}``, ``[]`` and ``()`` count as
    nothing. Falsy scalars such as ``""``, ``0`` and ``False`` are payloads.
    """

    kind: ClassVar[OutcomeKind] = OutcomeKind.NO_CONTENT

    payload: Payload = Field(
        default=None,
        description="Must be empty; present only to reject misuse at construction",
    )

    @model_validator(mode="after")
    def _reject_payload(self) -> "NoContent":
        if self.payload is not None and self.payload not in ({}, [], ()):
            raise ConfigurationError(
                "NoContent outcomes cannot carry a payload",
                context={"payload_type": type(self.payload).__name__},
            )
        return self


class ValidationFailure(Outcome):
    """Input failed validation; ``errors`` maps field names to messages.

    Field order is the order of the validation pass and is kept as given,
    as is the order of messages within each field.
    """

    kind: ClassVar[OutcomeKind] = OutcomeKind.VALIDATION_FAILURE

    errors: FieldErrors

    def __init__(self, errors: FieldErrorsInput | None = None, **data: Any) -> None:
        if errors is not None:
            data["errors"] = {
                field: [msgs] if isinstance(msgs, str) else list(msgs)
                for field, msgs in errors.items()
            }
        super().__init__(**data)

    @model_validator(mode="after")
    def _require_messages(self) -> "ValidationFailure":
        if not self.errors:
            raise ConfigurationError("ValidationFailure requires at least one field")
        empty = [field for field, messages in self.errors.items() if not messages]
        if empty:
            raise ConfigurationError(
                "ValidationFailure fields need at least one message",
                context={"fields": empty},
            )
        return self

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "ValidationFailure":
        """Group ``(field, message)`` pairs, keeping first-seen field order."""
        grouped: FieldErrors = {}
        for field, message in pairs:
            grouped.setdefault(field, []).append(message)
        return cls(grouped)


class MessageFailure(Outcome):
    """Failure variants that carry at most a single human-readable message."""

    message: str | None = None

    def __init__(self, message: str | None = None, **data: Any) -> None:
        if message is not None:
            data["message"] = message
        super().__init__(**data)


class BadRequest(MessageFailure):
    """The request was malformed."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.BAD_REQUEST


class Unauthorized(MessageFailure):
    """The client is not authenticated."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.UNAUTHORIZED


class Forbidden(MessageFailure):
    """The client is authenticated but not allowed to do this."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.FORBIDDEN


class NotFound(MessageFailure):
    """The addressed resource or route does not exist."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.NOT_FOUND


OUTCOME_TYPES: dict[OutcomeKind, type[Outcome]] = {
    OutcomeKind.SUCCESS: Success,
    OutcomeKind.CREATED: Created,
    OutcomeKind.NO_CONTENT: NoContent,
    OutcomeKind.VALIDATION_FAILURE: ValidationFailure,
    OutcomeKind.UNAUTHORIZED: Unauthorized,
    OutcomeKind.FORBIDDEN: Forbidden,
    OutcomeKind.NOT_FOUND: NotFound,
    OutcomeKind.BAD_REQUEST: BadRequest,
}
