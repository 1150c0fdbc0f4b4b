"""
PhotoCatalog FastAPI Application
Main entry point for the photo lookup API.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from photocatalog.api import admin, auth, catalog, health
from photocatalog.config import Settings, get_settings, mask_secret
from photocatalog.context import AppContext
from photocatalog.database import init_db, ping_db
from photocatalog.errors import register_error_handlers
from photocatalog.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    context: AppContext = app.state.context
    settings = context.settings
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    logger.info("Starting PhotoCatalog API...")
    logger.info(f"JWT secret: {mask_secret(settings.jwt_secret)}")
    logger.info(f"Admin key: {mask_secret(settings.admin_api_key)}")
    logger.info(f"NAS root path: {settings.nas_root_path or 'NOT SET'}")

    if settings.debug:
        await init_db(context.engine)
        logger.info("Database tables created (debug mode)")

    try:
        await ping_db(context.engine)
        logger.info("Database connection established.")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")

    yield

    logger.info("Shutting down PhotoCatalog API...")
    await context.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around a fresh context.

    Raises:
        ConfigurationError: If JWT_SECRET is not configured.
    """
    settings = settings or get_settings()
    settings.require_jwt_secret()

    app = FastAPI(
        title="PhotoCatalog",
        description="Authenticated lookup of inventory part photos stored on a file server.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = AppContext.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"[REQUEST] {request.method} {request.url.path}")
        return await call_next(request)

    register_error_handlers(app)

    prefix = settings.api_prefix
    app.include_router(health.router, prefix=prefix, tags=["Health"])
    app.include_router(auth.router, prefix=prefix, tags=["Auth"])
    app.include_router(catalog.router, prefix=prefix, tags=["Catalog"])
    app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["Admin"])

    return app


def run():
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "photocatalog.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
