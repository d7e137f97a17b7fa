"""
HTTP middleware: request ids and timing, security headers, body size limit.
"""

import time
import uuid
import logging
from typing import Callable, Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from fastapi import status

from app.core.config import settings
from app.core.error_handlers import create_error_response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id (the caller's, when sent) and time it."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        start_time = time.perf_counter()
        logger.debug(
            f"{request.method} {request.url.path} started",
            extra={"client_ip": request.client.host if request.client else None, **context}
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {request.url.path} failed with {type(exc).__name__}",
                extra={"process_time": time.perf_counter() - start_time, **context}
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.3f}s",
            extra={"status_code": response.status_code, **context}
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject bodies larger than ``max_request_size`` by their Content-Length."""

    def __init__(self, app, max_request_size: Optional[int] = None):
        super().__init__(app)
        self.max_request_size = max_request_size or settings.max_request_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > self.max_request_size:
            logger.warning(
                f"Rejected {content_length} byte body on {request.method} {request.url.path}",
                extra={"max_size": self.max_request_size}
            )
            return create_error_response(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Request body too large. Maximum size: {self.max_request_size} bytes",
                error_code="REQUEST_TOO_LARGE",
                error_data={"max_size": self.max_request_size, "actual_size": int(content_length)},
                request_id=getattr(request.state, "request_id", None)
            )

        return await call_next(request)


def add_middleware(app):
    # Last added runs first
    app.add_middleware(RequestSizeMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTrackingMiddleware)

    logger.info("Middleware registered")
