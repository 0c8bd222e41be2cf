"""Client-side style throttle for repeated actions such as posting notes."""

import time
from typing import Callable, Optional


class RateLimiter:
    """
    Enforce a minimum interval between recorded actions.

    State lives on the instance only, so every composer owns its own
    limiter. This is a best-effort throttle, not a security boundary.
    """

    def __init__(self, min_interval_ms: int = 10000, clock: Callable[[], float] = time.monotonic):
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._last_action: Optional[float] = None

    def _elapsed_ms(self) -> float:
        return (self._clock() - self._last_action) * 1000

    def can_perform_action(self) -> bool:
        if self._last_action is None:
            return True
        return self._elapsed_ms() >= self.min_interval_ms

    def record_action(self) -> None:
        self._last_action = self._clock()

    def get_time_until_next_action(self) -> float:
        """Milliseconds left before the next action is allowed (0 when allowed now)."""
        if self._last_action is None:
            return 0
        return max(0, self.min_interval_ms - self._elapsed_ms())
