"""
Request tracing middleware
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from wealth_oven.core.logging_config import set_trace_id, generate_trace_id
from wealth_oven.core.metrics import http_requests_total, http_request_duration_seconds

logger = logging.getLogger(__name__)


class TracingMiddleware(BaseHTTPMiddleware):
    """Attach a trace ID to every request, log it and record HTTP metrics"""

    async def dispatch(self, request: Request, call_next):
        # Generate or extract trace ID
        trace_id = request.headers.get("X-Trace-ID") or generate_trace_id()
        set_trace_id(trace_id)

        start_time = time.time()
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path},
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            http_requests_total.labels(request.method, self._endpoint(request), "500").inc()
            raise

        duration = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )

        endpoint = self._endpoint(request)
        http_requests_total.labels(request.method, endpoint, str(response.status_code)).inc()
        http_request_duration_seconds.labels(request.method, endpoint).observe(duration)

        response.headers["X-Trace-ID"] = trace_id
        return response

    @staticmethod
    def _endpoint(request: Request) -> str:
        # Route template keeps label cardinality bounded
        route = request.scope.get("route")
        return getattr(route, "path", "unmatched")
