"""Main FastAPI application for the Chat Feed API."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .db import create_message_store
from .db.connection import db_manager, get_db_pool
from .errors import register_exception_handlers
from .errors.problem_details import ServiceUnavailableError
from .middleware import RequestLoggingMiddleware
from .routes import conversations_router, messages_router

API_VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)


async def check_database() -> Optional[int]:
    """Run a trivial query; returns the active connection count."""
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval("SELECT COUNT(*) FROM pg_stat_activity")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(f"Starting {settings.app_name} with {settings.store_backend} store")
        logging.getLogger().setLevel(getattr(logging, settings.log_level))

        store = create_message_store(settings)
        if settings.store_backend == "postgres":
            try:
                await db_manager.initialize(settings)
                await check_database()
                logger.info("Database connectivity verified")
            except Exception as e:
                logger.error(f"Failed to initialize database: {e}")
                raise
        app.state.message_store = store

        yield

        logger.info(f"Shutting down {settings.app_name}")
        try:
            await store.close()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    app = FastAPI(
        title=settings.app_name,
        description="Cursor-paginated message feeds for chat conversations",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        servers=[{"url": settings.api_url}],
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(conversations_router, prefix="/v1")
    app.include_router(messages_router, prefix="/v1")

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint with database connectivity test."""
        status = {
            "status": "healthy",
            "service": settings.app_name,
            "version": API_VERSION,
            "store": settings.store_backend
        }
        if settings.store_backend != "postgres":
            return status
        try:
            await check_database()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError(
                detail="Database connection failed",
                database_error=str(e)
            )
        status["database"] = "connected"
        return status

    @app.get("/ready", tags=["Health"])
    async def ready_check(request: Request) -> Dict[str, Any]:
        """Readiness check endpoint."""
        if getattr(request.app.state, "message_store", None) is None:
            raise ServiceUnavailableError(detail="Service not ready")
        ready: Dict[str, Any] = {"status": "ready", "service": settings.app_name}
        if settings.store_backend == "postgres":
            try:
                ready["database_connections"] = await check_database()
            except Exception as e:
                logger.error(f"Readiness check failed: {e}")
                raise ServiceUnavailableError(detail="Service not ready", database_error=str(e))
        return ready

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {"status": "alive", "service": settings.app_name}

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "chatfeed.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
