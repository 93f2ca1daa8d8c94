"""Structured exception hierarchy for the Guidepost façade.

Every failure the façade can raise derives from GuidepostError, which carries
a machine-readable error code, a human-readable message, a severity and a
free-form context dictionary used for structured logging.

Key components:
- **ErrorCode enum**: Standardized error identifiers
- **Severity enum**: Error classification for logging and alerting
- **GuidepostError**: Base exception with context and chaining
- **ConfigurationError**: Setup/programming mistakes, fatal at startup
- **InvalidTimestampError**: Recoverable date/time input failures
- **RouteNotFoundError**: No registered capability matches a request

Configuration errors are never surfaced verbatim to end clients. The other
two are expected during normal operation and are translated into policy
outcomes at the transport boundary.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the Guidepost façade."""

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """The façade was set up or called in a way its conventions forbid."""

    # Input errors
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    """A date/time value could not be represented as a calendar date/time."""

    # Routing errors
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    """No registered capability matches the request path and method."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting."""

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single request but not the service."""

    HIGH = "HIGH"
    """Errors that indicate a misconfigured or broken deployment."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class GuidepostError(Exception):
    """Base exception class for all Guidepost exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    @property
    def is_expected(self) -> bool:
        """Whether this error occurs during normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ConfigurationError(GuidepostError):
    """Raised when the façade is configured or called against its conventions.

    Examples are a NoContent outcome carrying a payload, a success outcome
    built without a resource key, or registering a route after the router
    has been frozen. These are programming errors in the caller and are
    fatal at startup or construction time.

    Args:
        message: Description of the misconfiguration
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.CONFIGURATION_ERROR, message, Severity.HIGH, context, cause
        )


class InvalidTimestampError(GuidepostError):
    """Raised when a date/time value cannot be normalized or parsed.

    The caller decides whether this becomes a ValidationFailure outcome.
    When the failing value belongs to a named field, the field name is
    available as ``field``.

    Args:
        message: Description of the timestamp problem
        field: Name of the payload field holding the value, if known
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        context = dict(context or {})
        if field is not None:
            context["field"] = field
        super().__init__(
            ErrorCode.INVALID_TIMESTAMP, message, Severity.LOW, context, cause
        )

    @property
    def field(self) -> str | None:
        """Payload field the invalid value belongs to."""
        field = self.context.get("field")
        return str(field) if field is not None else None


class RouteNotFoundError(GuidepostError):
    """Raised when no registered capability matches a path and method.

    Args:
        path: The request path that was resolved
        method: The HTTP method that was resolved
        message: Optional override for the default message
    """

    def __init__(self, path: str, method: str, message: str | None = None) -> None:
        super().__init__(
            ErrorCode.ROUTE_NOT_FOUND,
            message or f"No route matches {method} {path}",
            Severity.LOW,
            {"path": path, "method": method},
        )
        self.path = path
        self.method = method
