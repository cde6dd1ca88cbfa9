# teamcal/core/auth/rate_limit.py
"""
Fixed-window rate limiter backed by Redis (INCR + EXPIRE).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from teamcal.config import settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


class RedisRateLimiter:
    """
    Считает запросы клиента в окне ``window_seconds``.
    При недоступном Redis пропускает запрос (fail open) и пишет warning.
    """

    def __init__(self, redis: Any, limit: int, window_seconds: int, prefix: str = "ratelimit") -> None:
        self.redis = redis
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    async def hit(self, key: str) -> RateLimitResult:
        redis_key = f"{self.prefix}:{key}"
        try:
            count = int(await self.redis.incr(redis_key))
            # TTL -1: ключ без срока (предыдущий EXPIRE не прошел), ставим заново
            if count == 1 or await self.redis.ttl(redis_key) == -1:
                await self.redis.expire(redis_key, self.window_seconds)
        except RedisError as exc:
            log.warning("Rate limiter unavailable, allowing request for %s: %s", key, exc)
            return RateLimitResult(allowed=True, remaining=self.limit)

        remaining = max(self.limit - count, 0)
        if count > self.limit:
            log.warning("Rate limit exceeded for %s (%d/%d)", key, count, self.limit)
            return RateLimitResult(allowed=False, remaining=0)
        return RateLimitResult(allowed=True, remaining=remaining)


_limiter_instance: RedisRateLimiter | None = None


def get_rate_limiter() -> RedisRateLimiter:
    """FastAPI зависимость: единственный экземпляр лимитера для /auth/me."""
    global _limiter_instance
    if _limiter_instance is None:
        client = Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
        _limiter_instance = RedisRateLimiter(
            client,
            limit=settings.RATE_LIMIT_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            prefix="ratelimit:auth_me",
        )
        log.info("Initialized rate limiter: %d req / %ds",
                 settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)
    return _limiter_instance


__all__ = ["RateLimitResult", "RedisRateLimiter", "get_rate_limiter"]
