import asyncio

from rtalks.model.ratelimit import new_limiter
from rtalks.model.ratelimit.window import window_start
import pytest


def hits(limiter, key, times, now):
    async def _run():
        return [await limiter.hit(key, now=now) for _ in range(times)]

    return asyncio.run(_run())


class TestMemoryLimiter:
    def test_allows_up_to_limit(self):
        limiter = new_limiter('memory', limit=3, window_seconds=60)
        results = hits(limiter, '10.0.0.1', 4, now=1_000)
        assert [h.allowed for h in results] == [True, True, True, False]
        assert [h.remaining for h in results] == [2, 1, 0, 0]

    def test_keys_are_independent(self):
        limiter = new_limiter('memory', limit=1, window_seconds=60)
        assert hits(limiter, 'a', 1, now=1_000)[0].allowed
        assert hits(limiter, 'b', 1, now=1_000)[0].allowed
        assert not hits(limiter, 'a', 1, now=1_001)[0].allowed

    def test_new_window_resets_count(self):
        limiter = new_limiter('memory', limit=1, window_seconds=60)
        assert hits(limiter, 'a', 2, now=1_200)[1].allowed is False
        assert hits(limiter, 'a', 1, now=1_260)[0].allowed is True

    def test_reset_at_is_window_end(self):
        limiter = new_limiter('memory', limit=5, window_seconds=900)
        (hit,) = hits(limiter, 'a', 1, now=1_000)
        assert hit.reset_at == window_start(1_000, 900) + 900 == 1_800


def test_redis_backend_needs_client():
    with pytest.raises(RuntimeError):
        new_limiter('redis', limit=1, window_seconds=60)


def test_unknown_backend():
    with pytest.raises(RuntimeError):
        new_limiter('memcached', limit=1, window_seconds=60)


class TestMemoryLimiterWindows:
    def test_closed_windows_are_forgotten(self):
        limiter = new_limiter('memory', limit=5, window_seconds=60)

        async def _run():
            for i in range(1000):
                await limiter.hit(f'10.0.{i // 256}.{i % 256}', now=0)
            # a fresh address in each later window
            for w in (1, 2, 3):
                await limiter.hit(f'192.168.0.{w}', now=w * 60)

        asyncio.run(_run())
        assert len(limiter._counts) == 1

    def test_late_hit_counts_against_open_window(self):
        limiter = new_limiter('memory', limit=1, window_seconds=60)
        hits(limiter, 'a', 1, now=120)
        (late,) = hits(limiter, 'a', 1, now=90)
        assert late.allowed is False
        assert late.reset_at == 180
