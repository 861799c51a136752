"""
Middleware configuration for the application.
Includes Correlation ID setup and request logging middleware.
"""

import time
import structlog
from typing import Callable
from fastapi import Request, Response
from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration.

    Large CSV imports can take a while; requests slower than
    ``SLOW_REQUEST_MS`` are logged as warnings.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        log = logger.bind(method=request.method, path=request.url.path)

        log.info("Request started", client_ip=request.client.host if request.client else "unknown")

        try:
            response = await call_next(request)
        except Exception:
            log.exception("Request failed", process_time_ms=_elapsed_ms(start_time))
            raise

        process_time_ms = _elapsed_ms(start_time)
        response.headers["X-Process-Time-Ms"] = str(process_time_ms)

        if process_time_ms > settings.SLOW_REQUEST_MS:
            log.warning("Slow request", status_code=response.status_code, process_time_ms=process_time_ms)
        else:
            log.info("Request completed", status_code=response.status_code, process_time_ms=process_time_ms)
        return response


def setup_middleware(app):
    """Setup all middleware for the application."""

    # Added last so it runs first and every log line carries the request id
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
