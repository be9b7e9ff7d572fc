"""Request logging middleware for the feed endpoints."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, window arguments, status and latency of API requests."""

    def __init__(self, app, path_prefix: str = "/v1"):
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        """Log request details and call next middleware."""
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(f"{request.method} {request.url.path} failed after {self._elapsed_ms(started):.1f}ms")
            raise

        query = f"?{request.url.query}" if request.url.query else ""
        logger.info(
            f"{request.method} {request.url.path}{query} -> {response.status_code} "
            f"in {self._elapsed_ms(started):.1f}ms",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code
            }
        )
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000
