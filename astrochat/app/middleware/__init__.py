"""Middleware package for the AstroChat backend."""

from astrochat.app.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimitMiddleware,
    RateLimitRule,
)
from astrochat.app.middleware.request_id import RequestIdMiddleware, get_request_id
from astrochat.app.middleware.request_size import RequestSizeLimitMiddleware
from astrochat.app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "InMemoryRateLimiter",
    "RateLimitMiddleware",
    "RateLimitRule",
    "RequestIdMiddleware",
    "get_request_id",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
