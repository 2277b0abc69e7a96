"""Request tracing middleware for the analytics API."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shiftguard.services.logging_config import bind_request_id, reset_request_id

logger = logging.getLogger("shiftguard-api.middleware")

# Probes are answered but not logged
QUIET_PATHS = frozenset({"/health", "/metrics"})


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's X-Request-ID (or mints one), binds it to the logging
    context for the duration of the request, and returns it together with
    X-Process-Time in milliseconds.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = bind_request_id(request_id)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            reset_request_id(token)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(elapsed_ms)

        if request.url.path not in QUIET_PATHS:
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "request_id": request_id,
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_status": response.status_code,
                    "duration_ms": elapsed_ms,
                },
            )
        return response
