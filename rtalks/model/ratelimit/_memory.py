from __future__ import annotations
import time
from typing import Dict

from .window import Hit, window_start


class FixedWindowLimiter:
    """Per-process counters. No locks: single-threaded event loop."""

    def __init__(self, *, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window = window_seconds
        # counts for the current window only
        self._current = 0
        self._counts: Dict[str, int] = {}

    async def hit(self, key: str, now: float | None = None) -> Hit:
        now = time.time() if now is None else now
        start = window_start(now, self.window)

        if start > self._current:
            # new window: every older counter is stale
            self._current = start
            self._counts = {}
        elif start < self._current:
            # late caller from a closed window; count it against the open one
            start = self._current

        count = self._counts.get(key, 0) + 1
        self._counts[key] = count
        return Hit(limit=self.limit, count=count,
                   reset_at=start + self.window)
