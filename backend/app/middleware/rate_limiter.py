# backend/app/middleware/rate_limiter.py
"""
Rate limiting for the Spyke marketplace API.

Sliding-window limits protect the login, registration and analytics
ingestion endpoints from brute force and event floods. A general per-IP
limit is applied to everything else by RateLimitMiddleware.

Counters live in process memory unless REDIS_URL is configured, in which
case a Redis sorted set per key makes the limit shared across workers.
"""

from collections import defaultdict, deque
from functools import lru_cache
import hashlib
import logging
import threading
import time
from typing import Callable, Deque, Dict, Optional, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
import redis
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings
from ..core.constants import ResponseMessage
from ..core.exceptions import RateLimitException
from ..errors import error_payload

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
UNLIMITED_PATHS = ("/health", "/v1/health", "/v1/analytics/self")


class MemoryRateLimitStore:
    """Per-process sliding window kept as a deque of hit timestamps per key."""

    def __init__(self) -> None:
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = 0.0
        self._longest_window = 0

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        """Drop keys whose newest hit has aged out of every window."""
        cutoff = now - self._longest_window
        for key in [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str, limit: int, window_seconds: int, now: float) -> Tuple[bool, int, int]:
        with self._lock:
            self._longest_window = max(self._longest_window, window_seconds)
            if now - self._last_sweep >= self._longest_window:
                self._sweep(now)

            hits = self._hits[key]
            window_start = now - window_seconds
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= limit:
                retry_after = max(1, int(hits[0] + window_seconds - now))
                return False, len(hits), retry_after

            hits.append(now)
            return True, len(hits), 0

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


class RedisRateLimitStore:
    """Shared sliding window on a Redis sorted set."""

    def __init__(self, client: "redis.Redis") -> None:
        self.redis = client

    def hit(self, key: str, limit: int, window_seconds: int, now: float) -> Tuple[bool, int, int]:
        pipe = self.redis.pipeline()
        # Remove old entries outside the window
        pipe.zremrangebyscore(key, 0, now - window_seconds)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, window_seconds + 60)
        results = pipe.execute()

        # results[1] is the count before adding current request
        requests_in_window = results[1]
        if requests_in_window >= limit:
            oldest = self.redis.zrange(key, 0, 0, withscores=True)
            if oldest:
                retry_after = max(1, int(oldest[0][1] + window_seconds - now))
            else:
                retry_after = window_seconds
            self.redis.zrem(key, str(now))
            return False, requests_in_window, retry_after

        return True, requests_in_window + 1, 0

    def reset(self, key: Optional[str] = None) -> None:
        if key is not None:
            self.redis.delete(key)


class RateLimiter:
    """
    Core rate limiting logic using a sliding window.

    A backend failure never blocks traffic: the request is allowed and the
    failure is logged.
    """

    def __init__(self, store=None, enabled: Optional[bool] = None):
        self.store = store or MemoryRateLimitStore()
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled

    @staticmethod
    def _get_cache_key(identifier: str, window_name: str) -> str:
        # Hash long identifiers to keep keys reasonable
        if len(identifier) > 32:
            identifier = hashlib.md5(identifier.encode()).hexdigest()[:16]
        return f"rate_limit:{window_name}:{identifier}"

    def check_rate_limit(
        self,
        identifier: str,
        limit: int,
        window_seconds: int = WINDOW_SECONDS,
        window_name: Optional[str] = None,
    ) -> Tuple[bool, int, int]:
        """
        Check if request is within rate limit.

        Returns:
            Tuple of (allowed, requests_made, retry_after_seconds)
        """
        if not self.enabled:
            return True, 0, 0

        window_name = window_name or f"{limit}per{window_seconds}s"
        key = self._get_cache_key(identifier, window_name)
        try:
            return self.store.hit(key, limit, window_seconds, time.time())
        except redis.RedisError as e:
            logger.error(f"Rate limit check failed: {e}")
            return True, 0, 0

    def reset(self, identifier: Optional[str] = None, window_name: Optional[str] = None) -> None:
        if identifier is None or window_name is None:
            self.store.reset()
        else:
            self.store.reset(self._get_cache_key(identifier, window_name))


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    if settings.redis_url:
        logger.info("Rate limiting backed by Redis")
        client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        return RateLimiter(RedisRateLimitStore(client))
    return RateLimiter(MemoryRateLimitStore())


def get_client_ip(request: Request) -> str:
    # Check for X-Forwarded-For header (proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def rate_limit(window_name: str, limit_setting: str) -> Callable:
    """
    Build a FastAPI dependency enforcing a per-IP limit.

    Args:
        window_name: Bucket name shared by the endpoints guarded together
        limit_setting: Settings attribute holding the requests-per-minute limit

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("auth", "rate_limit_auth_per_minute"))])
    """

    async def dependency(request: Request) -> None:
        limit = getattr(settings, limit_setting)
        allowed, _, retry_after = get_rate_limiter().check_rate_limit(
            get_client_ip(request), limit, WINDOW_SECONDS, window_name
        )
        if not allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s", get_client_ip(request), request.url.path
            )
            raise RateLimitException(ResponseMessage.TOO_MANY_REQUESTS, retry_after=retry_after)

    return dependency


rate_limit_auth = rate_limit("auth", "rate_limit_auth_per_minute")
rate_limit_analytics = rate_limit("analytics", "rate_limit_analytics_per_minute")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the general per-IP limit to every endpoint except health checks."""

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        limiter = self.rate_limiter or get_rate_limiter()
        limit = settings.rate_limit_general_per_minute
        allowed, requests_made, retry_after = limiter.check_rate_limit(
            get_client_ip(request), limit, WINDOW_SECONDS, "general"
        )
        if not allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=error_payload(
                    request, status.HTTP_429_TOO_MANY_REQUESTS, ResponseMessage.TOO_MANY_REQUESTS
                ),
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        if limiter.enabled:
            response.headers["X-RateLimit-Limit"] = str(limit)
            response.headers["X-RateLimit-Remaining"] = str(max(0, limit - requests_made))
        return response
