"""
Rate Limiting Middleware

Sliding-window limit per client IP on the ``/api/`` routes.
Counters live in process memory.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from codecollab.core.config import get_settings


@dataclass
class RateLimitResult:
    """Rate limit check result"""
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class SlidingWindowLimiter:
    """Keeps the request timestamps of each key inside the current window"""

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = 0.0

    def hit(self, key: str, now: Optional[float] = None) -> RateLimitResult:
        now = time.monotonic() if now is None else now
        window_start = now - self.window_seconds

        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(window_start)
                self._last_sweep = now

            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= self.max_requests:
                reset_after = int(hits[0] + self.window_seconds - now) + 1
                return RateLimitResult(False, self.max_requests, 0, reset_after)

            hits.append(now)
            reset_after = int(hits[0] + self.window_seconds - now) + 1
            return RateLimitResult(True, self.max_requests, self.max_requests - len(hits), reset_after)

    def _sweep(self, window_start: float) -> None:
        """Forget keys whose newest hit has left the window"""
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in stale:
            del self._hits[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """
    Reject clients that exceed the configured request limit with 429
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        path_prefix: str = "/api/",
        enabled: Optional[bool] = None,
    ):
        super().__init__(app)
        settings = get_settings()
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self.path_prefix = path_prefix
        self.limiter = SlidingWindowLimiter(
            max_requests or settings.rate_limit_requests,
            window_seconds or settings.rate_limit_window,
        )

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP with proxy support"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "127.0.0.1"

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.enabled or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        result = self.limiter.hit(self._get_client_ip(request))
        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_after),
        }

        if not result.allowed:
            headers["Retry-After"] = str(result.reset_after)
            return JSONResponse(
                status_code=HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests"},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
