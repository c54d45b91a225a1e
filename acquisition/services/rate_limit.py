from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from fastapi import Request, Response

from acquisition.core.config import settings
from acquisition.core.errors import RateLimited

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_seconds: int

class TokenRateLimiter:
    def __init__(self, redis_url: str | None = None, *, client: redis.Redis | None = None):
        self.r = client if client is not None else redis.from_url(redis_url, decode_responses=True)

    async def allow(self, *, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = int(time.time())
        window = now // window_seconds
        rkey = f"rl:{key}:{window}"

        # INCR with expiry
        val = await self.r.incr(rkey)
        if val == 1:
            await self.r.expire(rkey, window_seconds)

        remaining = max(0, limit - val)
        reset = window_seconds - (now % window_seconds)
        return RateLimitResult(allowed=val <= limit, remaining=remaining, reset_seconds=reset)


@lru_cache(maxsize=1)
def get_rate_limiter() -> TokenRateLimiter:
    return TokenRateLimiter(settings.redis_url)


async def rate_limit_gate(request: Request, response: Response) -> None:
    """Allow/deny gate applied per router. No-op unless RATE_LIMIT_ENABLED."""
    if not settings.rate_limit_enabled:
        return

    client_ip = request.client.host if request.client else "unknown"
    result = await get_rate_limiter().allow(
        key=client_ip,
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    if not result.allowed:
        log.warning("rate limit exceeded for %s on %s", client_ip, request.url.path)
        raise RateLimited(
            "Too Many Requests",
            details=[{"retry_after_seconds": result.reset_seconds}],
        )
