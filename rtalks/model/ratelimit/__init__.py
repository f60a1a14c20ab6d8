# model/ratelimit/__init__.py
from typing import Optional, Union
import redis.asyncio as redis

from ._memory import FixedWindowLimiter as MemoryLimiter
from ._redis import FixedWindowLimiter as RedisLimiter

BACKENDS = ("memory", "redis")

RateLimiter = Union[MemoryLimiter, RedisLimiter]


# Factory keeps server.py simple and constructor-agnostic:
def new_limiter(backend: str, *, limit: int, window_seconds: int,
                r: Optional[redis.Redis] = None) -> RateLimiter:
    if backend == "redis":
        if r is None:
            raise RuntimeError("RateLimiter(redis) requires r=redis.Redis")
        return RedisLimiter(r=r, limit=limit, window_seconds=window_seconds)
    if backend == "memory":
        return MemoryLimiter(limit=limit, window_seconds=window_seconds)
    raise RuntimeError(f"unknown rate limit backend: {backend!r}")


__all__ = ["RateLimiter", "new_limiter", "BACKENDS"]
