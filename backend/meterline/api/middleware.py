"""Middleware and exception handlers for the FastAPI application."""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from meterline.core.config import settings
from meterline.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    MeterlineException,
    NotFoundException,
    unpack_validation_error,
)
from meterline.core.logging import logger


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests with their duration and status."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions and turn them into a 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        response_content = {"detail": f"Internal Server Error: {exc.__class__.__name__}: {exc}"}
        if settings.LOCAL_DEVELOPMENT:
            response_content["trace"] = traceback.format_exc()

        return JSONResponse(status_code=500, content=response_content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Exception handler for request and model validation errors.

    Returns a 422 whose body lists one ``{location: message}`` entry per
    invalid field, e.g.::

        {"errors": [{"body.limits.0.limit": "Input should be greater than or equal to 0"}]}
    """
    error_messages = unpack_validation_error(exc)
    logger.warning(f"Validation error on {request.method} {request.url.path}: {error_messages}")
    return JSONResponse(status_code=422, content=error_messages)


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (NotFoundException): The exception object that was raised.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def invalid_state_exception_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """Exception handler for InvalidStateError (HTTP 400)."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def external_service_exception_handler(
    request: Request, exc: ExternalServiceError
) -> JSONResponse:
    """Exception handler for ExternalServiceError (HTTP 502).

    Only the message is returned; the failing service name stays in the logs.
    """
    logger.error(f"External service failure: {exc}")
    return JSONResponse(status_code=502, content={"detail": exc.message})


async def meterline_exception_handler(request: Request, exc: MeterlineException) -> JSONResponse:
    """Fallback handler for MeterlineException types without a dedicated handler."""
    logger.error(f"Unmapped {exc.__class__.__name__}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})
