"""Tests for request pacing."""

import threading

import pytest

from vab_app.utils.rate_limit import RateLimiter


class FakeClock:
    """Monotonic clock advanced by sleep calls and explicit ticks."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def tick(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestRateLimiter:
    """Test minimum spacing enforcement"""

    def test_first_call_not_delayed(self, clock):
        limiter = RateLimiter(0.1, clock=clock, sleep=clock.sleep)

        assert limiter.acquire() == 0.0
        assert clock.sleeps == []

    def test_back_to_back_calls_spaced(self, clock):
        limiter = RateLimiter(0.1, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.tick(0.03)
        waited = limiter.acquire()

        assert waited == pytest.approx(0.07)
        assert clock.sleeps == [pytest.approx(0.07)]
        assert limiter.wait_count == 1

    def test_slow_callers_not_delayed(self, clock):
        limiter = RateLimiter(0.1, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.tick(0.5)
        limiter.acquire()

        assert clock.sleeps == []

    def test_spacing_measured_from_previous_release(self, clock):
        limiter = RateLimiter(0.1, clock=clock, sleep=clock.sleep)

        for _ in range(4):
            limiter.acquire()

        assert clock.sleeps == [pytest.approx(0.1)] * 3
        assert clock.now == pytest.approx(0.3)

    def test_zero_interval(self, clock):
        limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)

        for _ in range(3):
            limiter.acquire()

        assert clock.sleeps == []

    def test_from_milliseconds(self):
        assert RateLimiter.from_milliseconds(250).min_interval == pytest.approx(0.25)

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            RateLimiter(-1)

    def test_shared_across_threads(self, clock):
        limiter = RateLimiter(0.1, clock=clock, sleep=clock.sleep)
        threads = [threading.Thread(target=limiter.acquire) for _ in range(5)]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Every call after the first waited a full interval on the shared clock
        assert clock.now == pytest.approx(0.4)
        assert limiter.wait_count == 4
