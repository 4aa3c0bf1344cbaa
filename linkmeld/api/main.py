"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, linkmeld.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkmeld.api.deps.dependencies import get_service_cache
from linkmeld.configs import get_settings
from linkmeld.observability import configure_logging

from .routers import captures_router, conversations_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Pre-warms shared clients on startup and closes them on shutdown.
    """
    logger = logging.getLogger("uvicorn")

    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    _ = cache.capture_store
    _ = cache.gateway
    logger.info("Service cache pre-warmed")

    yield

    await cache.aclose()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="LinkMeld Capture API",
        description="Grounded conversations over captured web pages and PDFs",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(conversations_router, prefix="/api/v1")
    app.include_router(captures_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "linkmeld.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
