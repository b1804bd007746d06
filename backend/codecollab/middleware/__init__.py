from .rate_limiting import RateLimitingMiddleware, SlidingWindowLimiter
from .security_headers import RequestSizeLimitMiddleware, SecurityHeadersMiddleware

__all__ = [
    "RateLimitingMiddleware",
    "SlidingWindowLimiter",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
