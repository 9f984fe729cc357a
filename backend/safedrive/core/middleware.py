"""
SafeDrive - HTTP Middleware

- RequestLoggingMiddleware: request ids, timing headers, access log
- SecurityHeadersMiddleware: fixed hardening headers on every response
- RequestSizeLimitMiddleware: 413 for oversized bodies
"""

import logging
import time
from typing import Callable, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from safedrive.core.logging_config import logger, generate_request_id, request_context


# Liveness checks and docs; not worth an access log line
UNLOGGED_PATHS = frozenset({"/health/live", "/health/ready", "/favicon.ico", "/docs", "/redoc", "/openapi.json"})

# Table fragments are requested while the user scrolls
DEBUG_PATH_PREFIXES = ("/ui/",)

SLOW_REQUEST_MS = 1000

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
}


def should_skip_logging(path: str) -> bool:
    return path in UNLOGGED_PATHS or path.startswith("/static/")


def access_log_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path.startswith(DEBUG_PATH_PREFIXES):
        return logging.DEBUG
    return logging.INFO


def extract_driver_id(path: str) -> str:
    """``/api/v1/drivers/{id}/...`` -> id; collection routes give ''"""
    _, found, rest = path.partition("/drivers/")
    if not found:
        return ""
    candidate = rest.split("/", 1)[0]
    return "" if candidate in ("", "stats", "window") else candidate


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id (``X-Request-ID`` from the client or a new
    one), logs its outcome and reports the duration in ``X-Response-Time``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        path = request.url.path

        with request_context(request_id, extract_driver_id(path)):
            if not should_skip_logging(path):
                logger.debug(f"--> {request.method} {path}")
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                elapsed = (time.perf_counter() - started) * 1000
                logger.error(
                    f"{request.method} {path} raised {type(exc).__name__} after {elapsed:.1f}ms",
                    exc_info=True,
                    extra={"event_type": "http_request_error", "http_method": request.method, "http_path": path},
                )
                raise

            elapsed = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"

            if not should_skip_logging(path):
                logger.log_request(
                    request.method,
                    path,
                    response.status_code,
                    elapsed,
                    level=access_log_level(path, response.status_code),
                    client_ip=request.client.host if request.client else "unknown",
                )
                if elapsed > SLOW_REQUEST_MS:
                    logger.log_performance(f"{request.method} {path}", elapsed, threshold_ms=SLOW_REQUEST_MS)

            return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose declared Content-Length exceeds ``max_size``"""

    def __init__(self, app: ASGIApp, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: body of {declared} bytes exceeds {self.max_size}"
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": f"Request body too large (limit {self.max_size} bytes)",
                    "code": "REQUEST_TOO_LARGE",
                }
            )
        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "SECURITY_HEADERS",
    "access_log_level",
    "extract_driver_id",
    "should_skip_logging",
]
