import time
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, Iterable, Optional, Set
import logging

from ..core.cache import cache
from ..core.roles import ROLE_ROUTES

logger = logging.getLogger(__name__)


def credential_paths(prefix: str) -> Set[str]:
    """Every login and registration path across all roles"""
    paths = set()
    for routes in ROLE_ROUTES.values():
        paths.add(prefix + routes.login)
        if routes.register:
            paths.add(prefix + routes.register)
    return paths


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window limit per client IP on the credential endpoints.

    Counters live in Redis; when Redis is unreachable requests are let through.
    """

    def __init__(
        self,
        app,
        paths: Iterable[str],
        requests_per_minute: int = 20,
        enabled: bool = True
    ):
        super().__init__(app)
        self.paths = set(paths)
        self.requests_per_minute = requests_per_minute
        self.enabled = enabled
        self.window = 60

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.method != "POST" or request.url.path not in self.paths:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        window_start = int(time.time() // self.window)
        key = f"rate_limit:{client_ip}:{request.url.path}:{window_start}"

        count = await cache.aincr(key, ttl=self.window)
        if count > self.requests_per_minute:
            retry_after = self.window - int(time.time() % self.window)
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            response = JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": "Too many attempts. Please try again later.",
                    "retry_after": retry_after
                }
            )
            response.headers["Retry-After"] = str(retry_after)
            response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
            response.headers["X-RateLimit-Remaining"] = "0"
            return response

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(max(self.requests_per_minute - count, 0))
        return response

    def _get_client_ip(self, request: Request) -> Optional[str]:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
