"""Global exception handlers for the FastAPI application.

Every failure leaves the application as an ``errors`` envelope, with the
status code taken from the outcome policy wherever the failure has a policy
outcome:

- RouteNotFoundError -> NotFound (404)
- InvalidTimestampError -> ValidationFailure on the offending field (422)
- RequestValidationError -> ValidationFailure grouped by field (422)
- HTTPException -> its policy outcome, or a ``base`` error with its status
- ConfigurationError and anything unhandled -> 500 with a generic message
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import INTERNAL_ERROR_MESSAGE
from src.api.utils.responses import envelope_response, outcome_response
from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.exceptions import (
    ConfigurationError,
    GuidepostError,
    InvalidTimestampError,
    RouteNotFoundError,
)
from src.domain.envelope import BASE_FIELD, error_envelope
from src.domain.outcomes import NotFound, ValidationFailure
from src.domain.status_policy import outcome_for_status


def _internal_error_response(exc: Exception) -> Response:
    settings = get_settings()
    if settings.environment == "production":
        message = INTERNAL_ERROR_MESSAGE
    else:
        message = f"Internal server error: {type(exc).__name__}"
    return envelope_response(
        error_envelope({BASE_FIELD: [message]}),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def guidepost_error_handler(request: Request, exc: Exception) -> Response:
    """Handle GuidepostError exceptions.

    Expected errors (route misses, bad timestamps) become policy outcomes.
    Configuration errors are logged at critical level and hidden from the
    client behind a generic 500.

    Raises:
        TypeError: If exc is not a GuidepostError instance
    """
    if not isinstance(exc, GuidepostError):
        raise TypeError(f"Expected GuidepostError, got {type(exc).__name__}")

    correlation_id = RequestContext.get_correlation_id()
    log = logger.bind(
        **{
            **exc.context,
            "correlation_id": correlation_id,
            "error_code": exc.error_code,
            "method": request.method,
            "path": str(request.url.path),
        }
    )

    if isinstance(exc, RouteNotFoundError):
        log.info("No route for {} {}", request.method, request.url.path)
        return outcome_response(NotFound())

    if isinstance(exc, InvalidTimestampError):
        log.warning("Invalid timestamp: {}", exc.message)
        field = exc.field or BASE_FIELD
        return outcome_response(ValidationFailure({field: [exc.message]}))

    if isinstance(exc, ConfigurationError):
        log.critical("Configuration error while handling request: {}", exc.message)
    else:
        log.error("Handling {}: {}", type(exc).__name__, exc.message)
    return _internal_error_response(exc)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    pairs: list[tuple[str, str]] = []
    for error in exc.errors():
        # ['body', 'email'] -> 'email'
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:] if loc != "__root__")
        pairs.append((field_name or BASE_FIELD, error.get("msg", "Invalid value")))

    outcome = ValidationFailure.from_pairs(pairs or [(BASE_FIELD, "Invalid request")])

    logger.warning(
        "Request validation failed",
        correlation_id=RequestContext.get_correlation_id(),
        method=request.method,
        path=str(request.url.path),
        validation_errors=outcome.errors,
    )
    return outcome_response(outcome)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        status_code=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
    )

    outcome = outcome_for_status(exc.status_code, str(exc.detail))
    if outcome is not None:
        return outcome_response(outcome, headers=exc.headers)
    return envelope_response(
        error_envelope({BASE_FIELD: [str(exc.detail)]}),
        exc.status_code,
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions nothing else handled.

    RequestContextMiddleware calls this directly so the response keeps the
    request's correlation ID. In production the exception type is hidden
    from the client.
    """
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        method=request.method,
        path=str(request.url.path),
    )
    return _internal_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(GuidepostError, guidepost_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
