"""Tests for todoist_assistant.ratelimit."""

from todoist_assistant.ratelimit import MAX_REQUESTS, PERIOD_SECONDS, RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_burst_up_to_capacity_does_not_wait() -> None:
    clock = FakeClock()
    limiter = RateLimiter(capacity=3, period=30, clock=clock, sleep=clock.sleep)
    for _ in range(3):
        limiter.acquire()
    assert clock.sleeps == []


def test_waits_for_next_token_when_empty() -> None:
    clock = FakeClock()
    limiter = RateLimiter(capacity=2, period=10, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    limiter.acquire()
    limiter.acquire()
    assert clock.sleeps == [5.0]


def test_tokens_refill_over_time() -> None:
    clock = FakeClock()
    limiter = RateLimiter(capacity=2, period=10, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    limiter.acquire()
    clock.now += 10
    limiter.acquire()
    limiter.acquire()
    assert clock.sleeps == []


def test_refill_is_capped_at_capacity() -> None:
    clock = FakeClock()
    limiter = RateLimiter(capacity=2, period=10, clock=clock, sleep=clock.sleep)
    clock.now += 1000
    for _ in range(3):
        limiter.acquire()
    assert len(clock.sleeps) == 1


def test_defaults_match_todoist_quota() -> None:
    limiter = RateLimiter()
    assert limiter.capacity == MAX_REQUESTS == 450
    assert PERIOD_SECONDS == 900
    assert limiter.rate == 0.5
