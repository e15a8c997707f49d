"""Logging middleware for request tracking."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from checkpoint.core.sanitization import normalize_staff_id

logger = structlog.get_logger(__name__)

STAFF_ID_HEADER = "X-Staff-Id"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a request id and the acting staff member."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            staff_id = normalize_staff_id(request.headers.get(STAFF_ID_HEADER))
        except ValueError:
            # Rejected properly by the endpoint dependency; only the log context is skipped
            staff_id = None

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
            staff_id=staff_id,
        )

        start_time = time.perf_counter()

        logger.debug(
            "request_started",
            query_params=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = time.perf_counter() - start_time
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.perf_counter() - start_time

        response.headers["X-Request-ID"] = request_id

        # Scan feedback must feel instant at the checkpoint; flag slow round trips
        log = logger.warning if duration > 1.0 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        return response
