"""Request context middleware for correlation IDs.

Reads the correlation ID from the incoming request (or generates one),
stores it in a context variable, binds it to every Loguru record emitted
while the request is handled, and echoes it back in the response headers.
Exceptions no handler claimed are rendered as the 500 error envelope while
the correlation ID is still in context.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER
from src.api.middleware.error_handler import generic_exception_handler
from src.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to each request and its log records."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with a correlation ID in context.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with the correlation ID header.
        """
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        try:
            with logger.contextualize(correlation_id=correlation_id):
                try:
                    response = await call_next(request)
                except Exception as exc:
                    # Render here so the 500 keeps the correlation ID
                    response = await generic_exception_handler(request, exc)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.clear()
