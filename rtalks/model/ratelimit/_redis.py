from __future__ import annotations
import time
import redis.asyncio as redis

from .window import Hit, window_start


# ---- keys
def k_window(key: str, start: int) -> str:
    return f"ratelimit:{key}:{start}"


class FixedWindowLimiter:
    """Shared counters, so several server processes see one budget."""

    def __init__(self, *, r: redis.Redis, limit: int,
                 window_seconds: int) -> None:
        self.r = r
        self.limit = limit
        self.window = window_seconds

    async def hit(self, key: str, now: float | None = None) -> Hit:
        now = time.time() if now is None else now
        start = window_start(now, self.window)

        pipe = self.r.pipeline(transaction=True)
        pipe.incr(k_window(key, start))
        pipe.expire(k_window(key, start), self.window + 60)
        count, _ = await pipe.execute()
        return Hit(limit=self.limit, count=int(count),
                   reset_at=start + self.window)
