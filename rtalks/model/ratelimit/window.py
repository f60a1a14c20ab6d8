from dataclasses import dataclass


@dataclass(frozen=True)
class Hit:
    limit: int
    count: int
    reset_at: int  # epoch seconds

    @property
    def allowed(self) -> bool:
        return self.count <= self.limit

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


def window_start(now: float, window_seconds: int) -> int:
    return int(now) - (int(now) % window_seconds)
