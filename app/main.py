"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (health and vending)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, body size cap, rate limiting)
- Logging configuration
- Storage shutdown (pooled database connections)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.interfaces.health import router as health_router
from app.interfaces.vending.dependencies import dispose_storage
from app.interfaces.vending.router import router as vending_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: announce the storage backend, close it on exit.

    The backend itself is built lazily by the first request that needs it.
    """
    logger.info(
        "%s %s starting with %s storage",
        settings.project_name,
        settings.version,
        settings.storage_backend,
    )
    yield
    dispose_storage()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level, sql_echo=settings.debug)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(
        SecurityHeadersMiddleware, max_body_bytes=settings.max_request_size_bytes
    )

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(vending_router, prefix="/api/v1")

    return app


app = create_app()
