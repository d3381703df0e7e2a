"""Request throttling for outbound calls.

Provides:
- A one-second counting window capped at max_requests_per_second
- Minimum spacing between consecutive dispatches
- Arrival-ordered admission for concurrent callers
"""

import asyncio
import logging
import threading
import time
import weakref
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 1.0


@dataclass
class ThrottleConfig:
    """Configuration for the throttle."""

    max_requests_per_second: float = 10
    burst_size: int = 5  # Submission queue admission, not the rate window

    def __post_init__(self):
        if self.max_requests_per_second <= 0:
            raise ValueError("max_requests_per_second must be positive")
        if self.burst_size < 1:
            raise ValueError("burst_size must be at least 1")

    @property
    def min_interval(self) -> float:
        """Minimum seconds between two dispatches."""
        return WINDOW_SECONDS / self.max_requests_per_second


class Throttle:
    """Counting-window throttle with minimum spacing.

    Callers on one event loop are admitted in arrival order. The counters are
    guarded by a threading.Lock, and each event loop gets its own asyncio.Lock,
    so one instance can be shared by executors running in different threads.

    Usage:
        throttle = Throttle(ThrottleConfig(max_requests_per_second=5))
        await throttle.acquire()
        # Dispatch the request
    """

    def __init__(
        self,
        config: Optional[ThrottleConfig] = None,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize throttle.

        Args:
            config: Throttle configuration
            clock: Time source in seconds
            sleep: Coroutine used to suspend callers
        """
        self.config = config or ThrottleConfig()
        self._clock = clock
        self._sleep = sleep
        self._state_lock = threading.Lock()
        self._loop_locks = weakref.WeakKeyDictionary()

        self.request_count = 0
        self.window_start = clock()
        self.last_request_time = 0.0

    def _admission_lock(self) -> asyncio.Lock:
        """Get the asyncio.Lock that orders callers on the running loop."""
        loop = asyncio.get_running_loop()
        with self._state_lock:
            lock = self._loop_locks.get(loop)
            if lock is None:
                lock = self._loop_locks[loop] = asyncio.Lock()
            return lock

    def _reserve(self) -> float:
        """Record a dispatch if one is allowed now.

        Returns:
            0.0 when the dispatch was recorded, otherwise seconds to wait
        """
        with self._state_lock:
            now = self._clock()

            if now - self.window_start >= WINDOW_SECONDS:
                self.request_count = 0
                self.window_start = now

            if self.request_count >= self.config.max_requests_per_second:
                return WINDOW_SECONDS - (now - self.window_start)

            since_last = now - self.last_request_time
            if since_last < self.config.min_interval:
                return self.config.min_interval - since_last

            self.request_count += 1
            self.last_request_time = now
            return 0.0

    async def acquire(self) -> None:
        """Wait until a dispatch is allowed, then record it."""
        async with self._admission_lock():
            while True:
                wait_time = self._reserve()
                if wait_time <= 0:
                    return

                logger.debug(f"Throttled, waiting {wait_time:.3f}s")
                await self._sleep(wait_time)

    def status(self) -> dict[str, Any]:
        """Get a snapshot of the throttle state."""
        with self._state_lock:
            return {
                "request_count": self.request_count,
                "window_start": self.window_start,
                "last_request_time": self.last_request_time,
                "max_requests_per_second": self.config.max_requests_per_second,
            }

    def reset(self) -> None:
        """Forget all recorded dispatches."""
        with self._state_lock:
            self.request_count = 0
            self.window_start = self._clock()
            self.last_request_time = 0.0
