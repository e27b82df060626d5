"""Middleware for rate limiting, security headers and request logging."""

import logging
import time
from datetime import UTC, datetime, timedelta

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from volunteer_portal.core.config import get_settings
from volunteer_portal.core.metrics import observe_http_request
from volunteer_portal.core.structured_logging import log_json, new_request_id, request_id_context

logger = logging.getLogger(__name__)
settings = get_settings()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        if settings.environment == "production":
            scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
            if scheme == "https":
                response.headers.setdefault(
                    "Strict-Transport-Security",
                    "max-age=63072000; includeSubDomains",
                )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP rate limiting for the unauthenticated profile setup endpoints.

    Limits (production only):
    - issue-invitation: ``rate_limit_issue_invitation_per_hour``
    - redeem-invitation: ``rate_limit_redeem_invitation_per_hour``
    """

    LIMITED_PATHS = {
        "/api/profile-setup/issue-invitation": "issue",
        "/api/profile-setup/redeem-invitation": "redeem",
    }

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._requests: dict[tuple[str, str], list[datetime]] = {}

    def _limit_for(self, endpoint: str) -> int:
        if endpoint == "issue":
            return settings.rate_limit_issue_invitation_per_hour
        return settings.rate_limit_redeem_invitation_per_hour

    def _prune(self, cutoff: datetime) -> None:
        """Forget clients with no request inside the window."""
        stale = [key for key, stamps in self._requests.items() if not stamps or stamps[-1] <= cutoff]
        for key in stale:
            del self._requests[key]

    def _hit(self, endpoint: str, identifier: str, window: timedelta) -> int:
        """Record a request and return how many fall inside the window."""
        now = datetime.now(UTC)
        cutoff = now - window
        self._prune(cutoff)

        key = (endpoint, identifier)
        stamps = [ts for ts in self._requests.get(key, []) if ts > cutoff]
        stamps.append(now)
        self._requests[key] = stamps
        return len(stamps)

    async def dispatch(self, request: Request, call_next):
        if settings.environment != "production":
            return await call_next(request)

        endpoint = self.LIMITED_PATHS.get(request.url.path)
        if endpoint:
            client_ip = request.client.host if request.client else "unknown"
            if self._hit(endpoint, client_ip, timedelta(hours=1)) > self._limit_for(endpoint):
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too many requests. Please try again later."},
                )

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request logging middleware with structured logging.

    Logs method, path, status code, duration and client IP as one JSON line
    and propagates ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next):
        candidate = (request.headers.get("X-Request-ID") or "").strip()
        if candidate and len(candidate) <= 128 and "\n" not in candidate and "\r" not in candidate:
            request_id = candidate
        else:
            request_id = new_request_id()

        request.state.request_id = request_id

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        with request_id_context(request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                log_json(
                    logger,
                    logging.ERROR,
                    "request_error",
                    method=method,
                    path=path,
                    status_code=500,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    client_ip=client_ip,
                    error=str(exc),
                    exception=exc.__class__.__name__,
                )
                raise

            response.headers.setdefault("X-Request-ID", request_id)
            duration_ms = (time.perf_counter() - start_time) * 1000

            route_obj = request.scope.get("route")
            route_template = getattr(route_obj, "path", None) or "unmatched"

            observe_http_request(
                method=method,
                route=route_template,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO

            log_json(
                logger,
                level,
                "request",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                client_ip=client_ip,
            )

            return response
