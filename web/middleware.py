"""
Request logging for the dashboard API.

Every request gets a correlation id (taken from ``X-Request-ID`` when the
dashboard sends one) that also travels to OCAPI on upstream calls. Liveness
checks and the dashboard's cache-stats polling are not logged.
"""
import time
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.observability import get_logger, generate_correlation_id, set_correlation_id

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/", "/api/health", "/api/cache/stats", "/favicon.ico"})

# Per-path slow thresholds; order queries page through OCAPI
SLOW_REQUEST_MS = {"/api/orders": 20_000, "/api/orders/summary": 20_000}
DEFAULT_SLOW_REQUEST_MS = 2_000


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlation id, one log line per request and timing headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Request-ID") or generate_correlation_id()
        set_correlation_id(correlation_id)

        path = request.url.path
        quiet = path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {path} raised {type(e).__name__}",
                extra={"path": path, "duration_ms": _elapsed_ms(started), "error": str(e)},
            )
            raise

        duration_ms = _elapsed_ms(started)
        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if quiet and response.status_code < 400:
            return response

        slow = duration_ms > SLOW_REQUEST_MS.get(path, DEFAULT_SLOW_REQUEST_MS)
        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400 or slow:
            log = logger.warning
        else:
            log = logger.info
        log(
            f"{request.method} {path} -> {response.status_code}",
            extra={
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else "unknown",
                "slow": slow,
            },
        )
        return response
