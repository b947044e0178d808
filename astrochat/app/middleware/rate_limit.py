"""Rate limiting middleware.

Per-client-IP sliding window limits, with separate budgets for different
path prefixes (questions are allowed more often than status polling is
restricted). State is in memory, which suits a single-instance deployment.
"""

import asyncio
import hashlib
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from astrochat.app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: Optional[int] = None


@dataclass
class RateLimitEntry:
    """Request count for the current window of one key."""
    requests: int = 0
    window_start: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RateLimitRule:
    """A request budget applied to paths starting with path_prefix."""
    path_prefix: str
    max_requests: int
    window_seconds: int
    message: str = "Too many requests from this IP, please try again later."


class InMemoryRateLimiter:
    """In-memory sliding window rate limiter.

    Memory optimization:
    - Uses OrderedDict for LRU cache behavior
    - Limits max entries to prevent unbounded memory growth
    """

    DEFAULT_MAX_ENTRIES = 10000

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: int = 60,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._max_entries = max_entries
        self._storage: OrderedDict[str, RateLimitEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    def _enforce_lru_limit(self) -> None:
        if len(self._storage) > self._max_entries:
            # Remove oldest 20% of entries
            remove_count = max(1, int(self._max_entries * 0.2))
            for _ in range(remove_count):
                self._storage.popitem(last=False)

    async def is_allowed(self, key: str) -> RateLimitResult:
        async with self._lock:
            now = time.time()
            self._enforce_lru_limit()

            if key in self._storage:
                self._storage.move_to_end(key)

            entry = self._storage.get(key)
            if entry is None or now - entry.window_start > self.window_seconds:
                entry = RateLimitEntry(requests=0, window_start=now)
                self._storage[key] = entry

            reset_time = int(entry.window_start + self.window_seconds)

            if entry.requests >= self.max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    reset_time=reset_time,
                    retry_after=max(1, int(self.window_seconds - (now - entry.window_start))),
                )

            entry.requests += 1
            return RateLimitResult(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - entry.requests,
                reset_time=reset_time,
            )


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce per-IP rate limits on matching paths.

    Requests whose path matches no rule pass through untouched. IP addresses
    are hashed before being used as keys.
    """

    def __init__(self, app, rules: Sequence[RateLimitRule] = ()):
        super().__init__(app)
        self.rules = list(rules)
        self._limiters = {
            rule.path_prefix: InMemoryRateLimiter(
                max_requests=rule.max_requests,
                window_seconds=rule.window_seconds,
            )
            for rule in self.rules
        }

    def _match_rule(self, path: str) -> Optional[RateLimitRule]:
        for rule in self.rules:
            if path.startswith(rule.path_prefix):
                return rule
        return None

    @staticmethod
    def _get_client_key(request: Request, rule: RateLimitRule) -> str:
        # 32 hex chars (128 bits) keeps raw IPs out of memory
        ip_hash = hashlib.sha256(get_client_ip(request).encode()).hexdigest()[:32]
        return f"ratelimit:{rule.path_prefix}:{ip_hash}"

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        rule = self._match_rule(request.url.path)
        if rule is None or request.method == "OPTIONS":
            return await call_next(request)

        limiter = self._limiters[rule.path_prefix]
        result = await limiter.is_allowed(self._get_client_key(request, rule))

        if not result.allowed:
            logger.info(
                "Rate limit exceeded",
                extra={"path": request.url.path, "method": request.method},
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": rule.message,
                    "retry_after": result.retry_after,
                },
                headers={
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(result.reset_time),
                    "Retry-After": str(result.retry_after),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset_time)
        return response
