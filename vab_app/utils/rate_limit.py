"""
Request pacing for exchange API calls.

One RateLimiter is shared by every worker that talks to the same API, so the
minimum spacing holds globally rather than per thread.
"""

import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """Enforces a minimum interval between successive calls."""

    def __init__(
        self,
        min_interval: float = 0.1,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        """
        Initialize the rate limiter.

        Args:
            min_interval: Minimum seconds between the start of two calls
            clock: Monotonic clock, injectable for tests
            sleep: Sleep function, injectable for tests
        """
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")
        self.min_interval = min_interval
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._lock = threading.Lock()
        self._last_call: Optional[float] = None
        self.wait_count = 0

    @classmethod
    def from_milliseconds(cls, delay_ms: int) -> "RateLimiter":
        return cls(min_interval=delay_ms / 1000.0)

    def acquire(self) -> float:
        """
        Block until the next call is allowed.

        Returns:
            Seconds spent waiting
        """
        with self._lock:
            now = self._clock()
            waited = 0.0
            if self._last_call is not None:
                elapsed = now - self._last_call
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    self._sleep(waited)
                    self.wait_count += 1
                    now = self._clock()
            self._last_call = now
            return waited
