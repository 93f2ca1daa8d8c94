"""Fixed mapping from outcome variants to HTTP status codes.

The policy table is the single place where domain outcomes meet HTTP. It is
total: every OutcomeKind has exactly one (code, reason) entry, which is
checked when this module is imported.

| Outcome variant   | Code | Reason               |
|-------------------|------|----------------------|
| Success           | 200  | ok                   |
| Created           | 201  | created              |
| NoContent         | 204  | no_content           |
| BadRequest        | 400  | bad_request          |
| Unauthorized      | 401  | unauthorized         |
| Forbidden         | 403  | forbidden            |
| NotFound          | 404  | not_found            |
| ValidationFailure | 422  | unprocessable_entity |
"""

from collections.abc import Mapping
from http import HTTPStatus
from types import MappingProxyType
from typing import NamedTuple

from src.core.exceptions import ConfigurationError
from src.domain.outcomes import (
    BadRequest,
    Forbidden,
    MessageFailure,
    NotFound,
    Outcome,
    OutcomeKind,
    Unauthorized,
    ValidationFailure,
)


class StatusEntry(NamedTuple):
    """HTTP status code and canonical reason symbol for an outcome."""

    code: int
    reason: str


STATUS_POLICY: Mapping[OutcomeKind, StatusEntry] = MappingProxyType(
    {
        OutcomeKind.SUCCESS: StatusEntry(HTTPStatus.OK.value, "ok"),
        OutcomeKind.CREATED: StatusEntry(HTTPStatus.CREATED.value, "created"),
        OutcomeKind.NO_CONTENT: StatusEntry(HTTPStatus.NO_CONTENT.value, "no_content"),
        OutcomeKind.BAD_REQUEST: StatusEntry(
            HTTPStatus.BAD_REQUEST.value, "bad_request"
        ),
        OutcomeKind.UNAUTHORIZED: StatusEntry(
            HTTPStatus.UNAUTHORIZED.value, "unauthorized"
        ),
        OutcomeKind.FORBIDDEN: StatusEntry(HTTPStatus.FORBIDDEN.value, "forbidden"),
        OutcomeKind.NOT_FOUND: StatusEntry(HTTPStatus.NOT_FOUND.value, "not_found"),
        OutcomeKind.VALIDATION_FAILURE: StatusEntry(
            HTTPStatus.UNPROCESSABLE_ENTITY.value, "unprocessable_entity"
        ),
    }
)


def verify_policy(policy: Mapping[OutcomeKind, StatusEntry]) -> None:
    """Check that a policy table is a total, one-to-one mapping.

    Raises:
        ConfigurationError: If a variant is missing or two variants share a code.
    """
    missing = [kind.value for kind in OutcomeKind if kind not in policy]
    if missing:
        raise ConfigurationError(
            "Status policy has no entry for some outcome variants",
            context={"missing": missing},
        )

    codes = [entry.code for entry in policy.values()]
    if len(set(codes)) != len(codes):
        raise ConfigurationError(
            "Status policy maps several outcome variants to the same code",
            context={"codes": codes},
        )


verify_policy(STATUS_POLICY)

_KIND_BY_CODE: Mapping[int, OutcomeKind] = MappingProxyType(
    {entry.code: kind for kind, entry in STATUS_POLICY.items()}
)

_MESSAGE_OUTCOMES: dict[OutcomeKind, type[MessageFailure]] = {
    OutcomeKind.BAD_REQUEST: BadRequest,
    OutcomeKind.UNAUTHORIZED: Unauthorized,
    OutcomeKind.FORBIDDEN: Forbidden,
    OutcomeKind.NOT_FOUND: NotFound,
}


def classify(outcome: Outcome) -> StatusEntry:
    """Map an outcome to its HTTP status code and reason symbol.

    Args:
        outcome: Any Outcome variant.

    Returns:
        StatusEntry: The (code, reason) pair from the policy table.

    Examples:
        >>> from src.domain.outcomes import Created
        >>> classify(Created({"id": 1}))
        StatusEntry(code=201, reason='created')
    """
    return STATUS_POLICY[outcome.kind]


def outcome_for_status(code: int, message: str | None = None) -> Outcome | None:
    """Build the failure outcome a framework-level HTTP error code stands for.

    Used at the transport boundary to render errors raised by the web
    framework itself (unknown paths, rejected methods) through the same
    policy as handler outcomes.

    Args:
        code: HTTP status code.
        message: Message to attach to the outcome.

    Returns:
        Outcome | None: The matching failure outcome, or None when the code
            is not a failure code in the policy table.
    """
    kind = _KIND_BY_CODE.get(code)
    if kind is None:
        return None
    if kind is OutcomeKind.VALIDATION_FAILURE:
        return ValidationFailure({"base": [message or STATUS_POLICY[kind].reason]})
    outcome_type = _MESSAGE_OUTCOMES.get(kind)
    if outcome_type is None:
        return None
    return outcome_type(message)
