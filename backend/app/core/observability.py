"""
Request tracing middleware.

Every request gets a correlation id (taken from X-Correlation-ID when the
caller sends one), which is echoed back, stored on request.state for the
error handlers, and attached to the one log line written per request.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("travel_backend.requests")

CORRELATION_HEADER = "X-Correlation-ID"

# Probes would otherwise drown out real traffic at INFO
QUIET_PATHS = {"/health"}


def get_correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or "-"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "ip": request.client.host if request.client else "unknown"
        }
        message = "[%s] %s %s -> %s (%.2f ms)"
        args = (correlation_id, request.method, request.url.path, response.status_code, duration_ms)

        if response.status_code >= 500:
            logger.error(message, *args, extra=log_data)
        elif response.status_code >= 400:
            logger.warning(message, *args, extra=log_data)
        elif request.url.path in QUIET_PATHS:
            logger.debug(message, *args, extra=log_data)
        else:
            logger.info(message, *args, extra=log_data)

        return response
