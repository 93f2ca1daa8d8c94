"""FastAPI application factory for the Guidepost façade.

``create_app`` wires a VersionRouter into a FastAPI application:
- Logging is configured before anything else logs
- Exception handlers render every failure as an ``errors`` envelope
- Middleware is registered in the correct order
- The route table is frozen when the application starts
- ``/health`` is served ahead of the versioned routes

Middleware are executed in reverse order of registration, so the last one
added is the first to see a request.
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from loguru import logger

from src.api.dispatch import mount_router
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.utils.responses import EnvelopeResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.domain.routing import VersionRouter


def make_lifespan(
    router: VersionRouter,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan handler that freezes ``router`` on startup."""

    @asynccontextmanager
    async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
        router.freeze()
        logger.info(
            "Application startup complete - {} v{}",
            app_instance.title,
            app_instance.version,
        )

        yield

        logger.info("Application shutdown complete")

    return lifespan


def create_app(
    router: VersionRouter | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        router: Router holding the registered resources. An empty router
            built from the routing settings is used if not provided.
        settings: Optional settings instance. If not provided, will use
            get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    if router is None:
        router = VersionRouter(
            allow_trailing_slash=settings.routing_config.allow_trailing_slash
        )

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        default_response_class=EnvelopeResponse,
        lifespan=make_lifespan(router),
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 2. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    # 1. Security headers middleware (adds security headers to all responses)
    application.add_middleware(
        SecurityHeadersMiddleware, security_config=settings.security_config
    )

    # 0. Plaintext requests never reach the application
    if settings.security_config.enforce_https:
        application.add_middleware(HTTPSRedirectMiddleware)

    @application.get("/health")
    async def health() -> dict[str, object]:
        """Health check endpoint for monitoring and load balancers.

        Returns:
            dict[str, object]: Status and the number of registered routes.
        """
        return {"status": "healthy", "routes": len(router)}

    # The catch-all route must come last
    mount_router(application, router)

    return application
