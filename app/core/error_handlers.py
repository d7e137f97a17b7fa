"""
Global error handlers.

Every error leaves the API in the same envelope::

    {"error": true, "status_code": 400, "detail": "dni-exist",
     "error_code": "dni-exist", "error_data": {...}, "timestamp": "...",
     "request_id": "..."}
"""

import logging
import traceback
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import (
    SQLAlchemyError,
    IntegrityError,
    DataError,
    OperationalError
)
from psycopg2.errors import UniqueViolation, ForeignKeyViolation, ConnectionException

from app.core.exceptions import BaseAPIException
from app.core.config import settings

logger = logging.getLogger(__name__)

# (exception class, driver error class or None) -> (status, error code, detail)
DATABASE_ERRORS = [
    (IntegrityError, UniqueViolation, status.HTTP_409_CONFLICT, "DUPLICATE_RESOURCE",
     "A person, employee or user with the provided data already exists"),
    (IntegrityError, ForeignKeyViolation, status.HTTP_400_BAD_REQUEST, "INVALID_REFERENCE",
     "Referenced employee, vaccine or role does not exist"),
    (IntegrityError, None, status.HTTP_400_BAD_REQUEST, "INTEGRITY_ERROR",
     "Data integrity constraint violated"),
    (DataError, None, status.HTTP_400_BAD_REQUEST, "DATA_ERROR",
     "Invalid data provided"),
    (OperationalError, ConnectionException, status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_CONNECTION_ERROR",
     "Database connection failed"),
]


def create_error_response(
    status_code: int,
    detail: str,
    error_code: str = None,
    error_data: Dict[str, Any] = None,
    request_id: str = None,
    headers: Dict[str, str] = None
) -> JSONResponse:
    """Build the error envelope."""
    content = {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if error_code:
        content["error_code"] = error_code
    if error_data:
        content["error_data"] = error_data
    if request_id:
        content["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers
    )


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method
    }


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    context = _request_context(request)
    logger.warning(
        f"{request.method} {request.url.path} rejected: {exc.error_code or 'UNKNOWN'} - {exc.detail}",
        extra={"status_code": exc.status_code, "error_code": exc.error_code, **context}
    )

    return create_error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        error_code=exc.error_code,
        error_data=exc.error_data,
        request_id=context["request_id"],
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors and the bearer scheme's missing-credentials error."""
    context = _request_context(request)
    logger.warning(f"HTTP {exc.status_code} - {exc.detail}", extra=context)

    return create_error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        error_code="HTTP_EXCEPTION",
        request_id=context["request_id"],
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    context = _request_context(request)
    validation_errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"{len(validation_errors)} validation error(s) on {request.method} {request.url.path}",
        extra=context
    )

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Request validation failed",
        error_code="VALIDATION_ERROR",
        error_data={"validation_errors": validation_errors},
        request_id=context["request_id"]
    )


def classify_database_error(exc: SQLAlchemyError):
    """Map a SQLAlchemy error to (status, error code, detail)."""
    original = getattr(exc, "orig", None)
    for exc_class, driver_class, status_code, error_code, detail in DATABASE_ERRORS:
        if isinstance(exc, exc_class) and (driver_class is None or isinstance(original, driver_class)):
            return status_code, error_code, detail
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "Database error occurred"


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    context = _request_context(request)
    status_code, error_code, detail = classify_database_error(exc)
    logger.error(
        f"Database error {error_code}: {type(exc).__name__}",
        extra={"error_details": str(exc), **context}
    )

    error_data: Optional[Dict[str, Any]] = None
    if settings.debug:
        error_data = {"exception_type": type(exc).__name__, "original_error": str(exc)}

    return create_error_response(
        status_code=status_code,
        detail=detail,
        error_code=error_code,
        error_data=error_data,
        request_id=context["request_id"]
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    context = _request_context(request)
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        extra={"traceback": traceback.format_exc(), **context}
    )

    error_data = None
    detail = "An unexpected error occurred. Please try again later."
    if settings.debug:
        detail = f"Internal server error: {exc}"
        error_data = {"exception_type": type(exc).__name__}

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
        error_code="INTERNAL_SERVER_ERROR",
        error_data=error_data,
        request_id=context["request_id"]
    )


ERROR_HANDLERS = {
    BaseAPIException: base_api_exception_handler,
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    SQLAlchemyError: sqlalchemy_exception_handler,
    Exception: generic_exception_handler,
}


def register_error_handlers(app):
    for exception_class, handler in ERROR_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

    logger.info("Error handlers registered")
