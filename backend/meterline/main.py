"""Main module of the FastAPI application.

This module sets up the FastAPI application, the middleware that logs
incoming requests and unhandled exceptions, and the exception handlers that
map domain errors to HTTP status codes.
"""

import os
import subprocess
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from meterline.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    external_service_exception_handler,
    invalid_state_exception_handler,
    log_requests,
    meterline_exception_handler,
    not_found_exception_handler,
    validation_exception_handler,
)
from meterline.api.v1.api import api_router
from meterline.core.config import settings
from meterline.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    MeterlineException,
    NotFoundException,
)
from meterline.core.logging import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Initializes the DI container and runs alembic migrations.
    """
    # Initialize the dependency injection container (fail fast if wiring is broken)
    from meterline.core.container import initialize_container, reset_container

    logger.info("Initializing dependency injection container...")
    initialize_container(settings)
    logger.info("Container initialized successfully")

    if settings.RUN_ALEMBIC_MIGRATIONS:
        logger.info("Running alembic migrations...")
        env = os.environ.copy()
        backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        env["PYTHONPATH"] = backend_dir
        subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "heads"],
            check=True,
            cwd=backend_dir,
            env=env,
        )

    yield

    # Let scheduled alert publishes finish before the bus goes away
    import meterline.core.container as di

    if di.container is not None:
        await di.container.alert_dispatcher.drain()
    reset_container()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

# Last registered = outermost middleware (sees the request first)
app.middleware("http")(add_request_id)
app.middleware("http")(log_requests)
app.middleware("http")(exception_logging_middleware)

# Register exception handlers
app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(NotFoundException)(not_found_exception_handler)
app.exception_handler(InvalidStateError)(invalid_state_exception_handler)
app.exception_handler(ExternalServiceError)(external_service_exception_handler)

# Catch-all for the remaining Meterline exceptions
app.exception_handler(MeterlineException)(meterline_exception_handler)
