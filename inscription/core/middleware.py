import logging
import time
import uuid
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from inscription.core.logging_utils import error_tracker

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATHS = ("/health", "/docs", "/openapi.json", "/redoc")
# Responses carrying personal data must not be cached by proxies or browsers
PRIVATE_PATH_PREFIXES = ("/api/v1/registrations",)


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (
        request.client.host if request.client else "unknown"
    )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, tagged with a request id.

    The id comes from X-Request-ID when the client sends one and is echoed
    back in the response. Requests slower than ``slow_request_threshold``
    seconds are logged as warnings.
    """

    def __init__(
        self,
        app: ASGIApp,
        exclude_paths: Optional[Iterable[str]] = None,
        slow_request_threshold: float = 1.0,
    ):
        super().__init__(app)
        self.exclude_paths = frozenset(exclude_paths or DEFAULT_EXCLUDE_PATHS)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": get_client_ip(request),
        }
        if "idempotency-key" in request.headers:
            context["idempotency_key"] = request.headers["idempotency-key"]

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} raised {type(e).__name__}",
                extra={**context, "duration_ms": _elapsed_ms(started)},
            )
            raise

        duration_ms = _elapsed_ms(started)
        context.update(status_code=response.status_code, duration_ms=duration_ms)
        if duration_ms > self.slow_request_threshold * 1000:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {duration_ms}ms",
                extra={**context, "category": "performance"},
            )
        else:
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra=context,
            )

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith(PRIVATE_PATH_PREFIXES):
            response.headers["Cache-Control"] = "no-store"

        return response


class ErrorTrackingMiddleware(BaseHTTPMiddleware):
    """Feed 5xx responses and unhandled exceptions to the error tracker"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception as e:
            error_tracker.track_error(f"UNHANDLED_{type(e).__name__}", str(e), context)
            raise

        if response.status_code >= 500:
            error_tracker.track_error(
                f"HTTP_{response.status_code}",
                f"{request.method} {request.url.path} answered {response.status_code}",
                context,
            )
        return response


def setup_middleware(app, config: dict = None):
    """Starlette runs middleware in reverse order of addition: logging sees requests first"""
    config = config or {}

    app.add_middleware(ErrorTrackingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths=config.get("exclude_paths", DEFAULT_EXCLUDE_PATHS),
        slow_request_threshold=config.get("slow_request_threshold", 1.0),
    )
