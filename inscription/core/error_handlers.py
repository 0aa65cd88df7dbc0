"""
Exception handlers for the registration API

Every error leaves the API in one envelope:
{"error": ..., "message": ..., "details": ..., "path": ...}

Validation errors additionally carry ``details.errors``, a field -> message
map the form displays inline.
"""

import json
import logging
import re
import traceback
from typing import Dict, List

from asyncpg.exceptions import (
    ConnectionDoesNotExistError,
    ConnectionFailureError,
    PostgresError,
    TooManyConnectionsError,
)
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError,
)

from inscription.core.config import DEBUG
from inscription.core.exceptions import (
    BaseAppException,
    DatabaseConnectionError,
    DatabaseError,
    DatabaseIntegrityError,
    DatabaseTimeoutError,
)

logger = logging.getLogger(__name__)

CONSTRAINT_PATTERN = re.compile(r'constraint "([^"]+)"')


def error_response(
    request: Request, status_code: int, error: str, message: str, details: dict = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details or {},
            "path": request.url.path,
        },
    )


def _request_context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.error_code} ({exc.status_code}): {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details, **_request_context(request)},
    )
    return error_response(
        request, exc.status_code, exc.error_code, exc.message, exc.details
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}", extra=_request_context(request)
    )
    return error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


def _json_safe(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


def format_validation_errors(errors) -> List[Dict]:
    """Pydantic errors as field/message pairs, without the ``body`` prefix"""
    formatted = []
    for error in errors:
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        formatted.append(
            {
                "field": field,
                "message": error.get("msg", "Validation error"),
                "type": error.get("type", "value_error"),
                "input": _json_safe(error.get("input")),
            }
        )
    return formatted


def first_message_per_field(formatted: List[Dict]) -> Dict[str, str]:
    messages = {}
    for error in formatted:
        messages.setdefault(error["field"], error["message"])
    return messages


async def validation_exception_handler(request: Request, exc) -> JSONResponse:
    formatted = format_validation_errors(exc.errors())
    logger.warning(
        f"Validation failed on {len(formatted)} field(s)",
        extra={"errors": formatted, **_request_context(request)},
    )
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        f"Validation failed for {len(formatted)} field(s)",
        {"fields": formatted, "errors": first_message_per_field(formatted)},
    )


def _constraint_name(exc: IntegrityError) -> str:
    name = getattr(exc.orig, "constraint_name", None)
    if name:
        return name
    match = CONSTRAINT_PATTERN.search(str(exc.orig))
    return match.group(1) if match else "unknown"


def as_database_exception(exc: Exception) -> BaseAppException:
    """Map driver and ORM errors onto application exceptions"""
    if isinstance(exc, IntegrityError):
        return DatabaseIntegrityError(_constraint_name(exc), {"original_error": str(exc.orig)})
    if isinstance(
        exc,
        (OperationalError, DisconnectionError, ConnectionFailureError, ConnectionDoesNotExistError),
    ):
        return DatabaseConnectionError("Database connection lost")
    if isinstance(exc, TooManyConnectionsError):
        return DatabaseConnectionError("Too many database connections")
    if isinstance(exc, TimeoutError):
        return DatabaseTimeoutError("database_operation", 30)
    if isinstance(exc, PostgresError):
        return DatabaseError(
            f"PostgreSQL error: {exc}", {"postgres_code": getattr(exc, "sqlstate", None)}
        )
    return DatabaseError(f"Database operation failed: {exc}")


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Database exception: {type(exc).__name__} - {exc}",
        extra={"exception_type": type(exc).__name__, **_request_context(request)},
    )
    return await app_exception_handler(request, as_database_exception(exc))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {exc}",
        extra={"exception_type": type(exc).__name__, **_request_context(request)},
        exc_info=True,
    )

    details = {}
    if DEBUG:
        details = {"exception_type": type(exc).__name__, "traceback": traceback.format_exc()}

    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        details,
    )


def setup_exception_handlers(app):
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(PostgresError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
