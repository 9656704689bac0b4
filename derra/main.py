"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures
logging, middleware, routes and exception handlers, and picks the
storage backend once for the lifetime of the process.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from derra.api import auth, businesses, categories, messages, notifications, subscriptions, users
from derra.core.auth import close_redis
from derra.core.config import settings
from derra.core.exception_handlers import (
    app_exception_handler,
    database_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from derra.core.exceptions import AppException
from derra.core.logging_config import setup_logging
from derra.db.seed import seed_default_categories
from derra.middleware.request_context import RequestContextMiddleware
from derra.storage.factory import StorageProvider, create_storage_provider

logger = logging.getLogger(__name__)


def create_app(storage_provider: Optional[StorageProvider] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        storage_provider: Overrides the backend selected by STORAGE_BACKEND
            (tests pass their own)

    Returns:
        Configured FastAPI application instance
    """
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Business directory API",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )
    app.state.storage_provider = storage_provider or create_storage_provider(
        settings.STORAGE_BACKEND
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Liveness probe; does not touch storage."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "storage": settings.STORAGE_BACKEND,
        }

    @app.on_event("startup")
    async def startup_event():
        """Create tables (database backend) and seed default categories."""
        if storage_provider is None and settings.STORAGE_BACKEND == "database":
            from derra.db.session import create_tables

            await create_tables()

        if settings.SEED_DEFAULT_CATEGORIES:
            async with app.state.storage_provider() as storage:
                await seed_default_categories(storage)

        logger.info("%s started (%s storage)", settings.PROJECT_NAME, settings.STORAGE_BACKEND)

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_redis()

    for module in (auth, categories, businesses, users, subscriptions, messages, notifications):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "derra.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
    )
