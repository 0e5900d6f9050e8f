"""Sliding-window request rate limiter."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LimiterState(str, Enum):
    """Limiter state."""

    READY = "ready"
    THROTTLED = "throttled"


class SlidingWindowRateLimiter:
    """
    Allow at most max_requests calls per sliding window.

    State lives in the instance, so one limiter only throttles the process
    that owns it. Multi-instance deployments need a shared store instead.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        buffer_seconds: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the limiter.

        Args:
            max_requests: Calls allowed per window
            window_seconds: Window length
            buffer_seconds: Extra wait added once throttled
            clock: Monotonic clock returning seconds
            sleep: Coroutine used to wait
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.buffer_seconds = buffer_seconds
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()
        self.state = LimiterState.READY

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

    @property
    def in_window(self) -> int:
        """Number of calls recorded in the current window."""
        self._prune(self._clock())
        return len(self._timestamps)

    async def acquire(self) -> float:
        """
        Wait until a call is allowed and record it.

        Returns:
            Seconds spent waiting
        """
        waited = 0.0
        async with self._lock:
            now = self._clock()
            self._prune(now)
            while len(self._timestamps) >= self.max_requests:
                oldest_age = now - self._timestamps[0]
                wait = self.window_seconds - oldest_age + self.buffer_seconds
                self.state = LimiterState.THROTTLED
                logger.info(
                    f"Rate limit reached ({self.max_requests}/{self.window_seconds:.0f}s), "
                    f"waiting {wait:.2f}s"
                )
                await self._sleep(wait)
                waited += wait
                now = self._clock()
                self._prune(now)

            self._timestamps.append(now)
            self.state = LimiterState.READY
        return waited

    def reset(self) -> None:
        """Forget all recorded calls."""
        self._timestamps.clear()
        self.state = LimiterState.READY
