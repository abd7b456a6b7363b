"""
Request logging middleware for the FastAPI application.
"""

import time
from typing import Callable, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger, set_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and logs its outcome and duration."""

    def __init__(self, app, exclude_paths: Optional[List[str]] = None):
        super().__init__(app)
        self.logger = get_logger("middleware.requests")
        self.exclude_paths = exclude_paths or ["/health", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))

        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        start_time = time.perf_counter()
        self.logger.info(
            "Request started",
            extra={'method': request.method, 'path': request.url.path}
        )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "Request failed",
                extra={
                    'method': request.method,
                    'path': request.url.path,
                    'duration_ms': round((time.perf_counter() - start_time) * 1000, 2),
                    'error_type': type(e).__name__,
                    'error_message': str(e)
                },
                exc_info=True
            )
            raise

        self.logger.info(
            "Request completed",
            extra={
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': round((time.perf_counter() - start_time) * 1000, 2)
            }
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
