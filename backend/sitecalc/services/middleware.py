"""Request timing, tracing and security-header middleware for SiteCalc."""
import re
import time
import uuid
import logging
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sitecalc-api.middleware")

SKIP_LOG_PATHS = {"/health"}

_CALCULATOR_PATH_RE = re.compile(r"^/api/calculators/([^/]+)")


def calculator_id_from_path(path: str) -> Optional[str]:
    """Calculator id in an /api/calculators/... path, else None."""
    match = _CALCULATOR_PATH_RE.match(path)
    return match.group(1) if match else None


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    - Assigns a unique X-Request-ID (uuid4) to every request/response.
    - Measures end-to-end request duration in milliseconds.
    - Adds X-Process-Time header to every response.
    - Emits a structured log line for every request (except /health),
      tagged with the calculator id on calculator routes.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid.uuid4())
        start_time = time.perf_counter()

        request.state.request_id = request_id

        response: Response = await call_next(request)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)

        if request.url.path not in SKIP_LOG_PATHS:
            extra = {
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status": response.status_code,
                "request_id": request_id,
                "duration_ms": duration_ms,
            }
            calculator_id = calculator_id_from_path(request.url.path)
            if calculator_id:
                extra["estimate_id"] = calculator_id
            logger.info("request completed", extra=extra)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds standard security headers to every response."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
