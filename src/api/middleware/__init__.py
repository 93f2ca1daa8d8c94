"""FastAPI middleware and exception handlers.

- **SecurityHeadersMiddleware**: HSTS and content-sniffing protection
- **RequestContextMiddleware**: Correlation IDs in context, logs and headers
- **error_handler**: Renders every failure as an ``errors`` envelope

Middleware run in reverse order of registration; see ``create_app``.
"""
