"""Security headers middleware.

Conforming deployments are HTTPS-only. Strict-Transport-Security tells
clients never to fall back to plaintext, and the remaining headers keep
JSON responses from being sniffed or framed.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.config import SecurityConfig


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Strict-Transport-Security (when HSTS is enabled)

    Args:
        app: The ASGI application to wrap.
        security_config: HSTS settings. Defaults to SecurityConfig().
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        security_config: SecurityConfig | None = None,
    ) -> None:
        super().__init__(app)
        self.security_config = security_config or SecurityConfig()

    def build_hsts_header(self) -> str:
        """Build the Strict-Transport-Security header value."""
        config = self.security_config
        parts = [f"max-age={config.hsts_max_age}"]
        if config.hsts_include_subdomains:
            parts.append("includeSubDomains")
        if config.hsts_preload:
            parts.append("preload")
        return "; ".join(parts)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Add security headers to the response."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if self.security_config.hsts_enabled:
            response.headers["Strict-Transport-Security"] = self.build_hsts_header()

        return response
