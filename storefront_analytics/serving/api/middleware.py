"""
API Middleware

- Request logging with a request id bound to every log line
- In-memory rate limiting per client
"""

import asyncio
import time
from typing import Callable, Dict, List

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
            )

            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window rate limiter keyed by client host.

    State lives in the worker process, so each worker enforces its own limit.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, List[float]] = {}
        self._lock = asyncio.Lock()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_id = request.client.host if request.client else "unknown"
        current_time = time.time()

        async with self._lock:
            recent = [
                t for t in self._requests.get(client_id, [])
                if current_time - t < self.window_seconds
            ]

            if len(recent) >= self.max_requests:
                self._requests[client_id] = recent
                logger.warning(
                    "Rate limit exceeded",
                    client=client_id,
                    requests=len(recent),
                )
                return Response(
                    content='{"error": "RateLimitExceeded", "message": "Rate limit exceeded"}',
                    status_code=429,
                    media_type="application/json",
                    headers={
                        "Retry-After": str(self.window_seconds),
                        "X-RateLimit-Limit": str(self.max_requests),
                        "X-RateLimit-Remaining": "0",
                    },
                )

            recent.append(current_time)
            self._requests[client_id] = recent
            remaining = self.max_requests - len(recent)
            self._evict_idle(current_time)

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def _evict_idle(self, current_time: float) -> None:
        """Forget clients with no request inside the window"""
        idle = [
            client_id for client_id, timestamps in self._requests.items()
            if not timestamps or current_time - timestamps[-1] >= self.window_seconds
        ]
        for client_id in idle:
            del self._requests[client_id]
