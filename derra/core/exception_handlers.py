"""
Translation of raised errors into HTTP responses.

WHY: Services raise the taxonomy in derra.core.exceptions and never build
responses themselves. Everything that escapes a route, including request
validation and database failures, leaves as the same four-key JSON body.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from derra.core.exceptions import AppException, DatabaseError

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Serialize an AppException with its own status code; 5xx are logged."""
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s", exc.__class__.__name__, request.method, request.url.path, exc.message
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    The message names every offending field so clients can correct their
    input in one round trip.

    Args:
        request: The FastAPI request object
        exc: The Pydantic validation error

    Returns:
        JSONResponse with validation error details
    """
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        errors.append(
            {
                "field": ".".join(loc),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    fields = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": fields or "Request validation failed",
            "status_code": 400,
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions (unknown routes, wrong methods).

    Args:
        request: The FastAPI request object
        exc: The HTTP exception

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "message": exc.detail,
            "status_code": exc.status_code,
            "details": None,
        },
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle failures of the persistence medium.

    The full error goes to the log for operators; the client only sees the
    generic DatabaseError body.
    """
    logger.exception("Persistence failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=DatabaseError().to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for anything not in the taxonomy.

    The traceback is logged; the client gets a body without internals.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "details": None,
        },
    )
