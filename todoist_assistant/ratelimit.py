"""Token-bucket rate limiting for outbound Todoist requests."""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Todoist allows 450 requests per 15 minutes per user.
MAX_REQUESTS = 450
PERIOD_SECONDS = 15 * 60


class RateLimiter:
    """Allow ``capacity`` requests per ``period`` seconds, refilling continuously.

    ``acquire()`` blocks until a token is available instead of failing, so a
    burst of calls simply slows down once the bucket is empty.
    """

    def __init__(
        self,
        capacity: int = MAX_REQUESTS,
        period: float = PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.capacity = capacity
        self.rate = capacity / period
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()

    def _refill(self) -> None:
        now = self._clock()
        self._tokens = min(self.capacity, self._tokens + (now - self._updated) * self.rate)
        self._updated = now

    def acquire(self) -> None:
        self._refill()
        if self._tokens < 1:
            wait = (1 - self._tokens) / self.rate
            logger.debug(f"Rate limit reached, waiting {wait:.1f}s")
            self._sleep(wait)
            self._refill()
        self._tokens -= 1
