"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.exceptions import ConfigurationError
from src.domain.tokens import TokenCodec

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "swipe account API - Register, log in and complete a freelancer or client profile",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Builds the token codec (refuses to start without a signing secret)
    - Creates database connection pool and runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    try:
        app.state.token_codec = TokenCodec(
            secret=settings.jwt_secret,
            expires_in_seconds=settings.jwt_expires_in_seconds,
            algorithm=settings.jwt_algorithm,
        )
    except ConfigurationError as e:
        logger.critical("Refusing to start: %s. Set JWT_SECRET in the environment or .env file.", e)
        raise

    pool = None
    if settings.store_backend == "memory":
        logger.warning("Using in-memory account store; accounts will not survive restart")
        app.state.repository = InMemoryAccountRepository()
    else:
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        # Store pool in app state for dependency injection
        app.state.pool = pool
        app.state.repository = PostgresAccountRepository(pool)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="swipe",
    description="Two-sided freelancer/client matching - account, credential and session API",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(v1_router)


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and account store are healthy.
    Raises exception if the store is unreachable.
    """
    request.app.state.repository.ping()

    return {"status": "healthy"}
