"""Retry with exponential backoff and throttling.

Provides automatic retry for transient upstream failures with:
- Configurable retry count
- Exponential backoff with jitter
- Failure classification (transient vs. fatal)
- Throttled dispatch and a serializing submission queue
"""

import asyncio
import functools
import logging
import random
import socket
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .throttle import Throttle, ThrottleConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Error names that mark a transient network failure
RETRYABLE_ERROR_CODES = (
    "ECONNRESET",
    "ECONNREFUSED",
    "ETIMEDOUT",
    "ENOTFOUND",
    "ECONNABORTED",
)

# Lowercase message fragments that mark a transient failure
RETRYABLE_MESSAGES = (
    "timeout",
    "network",
    "connection",
    "server error",
    "internal server error",
)

# Python's own spelling of the transient network errors above
RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    socket.gaierror,
)

RATE_LIMITED_STATUS = 429

JITTER_FACTOR = 0.1

QueuedJob = tuple[Callable[[], Awaitable[Any]], Optional[str], asyncio.Future]


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3  # Retries after the initial attempt
    base_delay: float = 1.0  # Base delay in seconds
    max_delay: float = 30.0  # Maximum delay in seconds
    backoff_multiplier: float = 2.0
    jitter: bool = True  # Add up to 10% random extra delay

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0 or self.max_delay <= 0:
            raise ValueError("base_delay and max_delay must be positive")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1


class RetryExhaustedError(Exception):
    """Raised when the last allowed attempt fails."""

    def __init__(self, context: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{context} failed after {attempts} attempts. Last error: {last_error}"
        )
        self.context = context
        self.attempts = attempts
        self.last_error = last_error


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate backoff delay for a retry attempt.

    Args:
        attempt: Index of the attempt that just failed (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(config.base_delay * (config.backoff_multiplier**attempt), config.max_delay)

    if config.jitter:
        delay += random.random() * JITTER_FACTOR * delay

    return delay


def _status_of(error: BaseException) -> Optional[int]:
    """Find a numeric HTTP status carried by an exception, if any."""
    for candidate in (
        getattr(error, "status", None),
        getattr(error, "status_code", None),
        getattr(getattr(error, "response", None), "status_code", None),
    ):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
    return None


def is_retryable_error(error: BaseException) -> bool:
    """Determine if a failure is transient and worth retrying.

    Args:
        error: The exception that occurred

    Returns:
        True if should retry
    """
    if isinstance(error, RETRYABLE_EXCEPTIONS):
        return True

    message = str(error)
    if any(code in message for code in RETRYABLE_ERROR_CODES):
        return True

    lowered = message.lower()
    if any(fragment in lowered for fragment in RETRYABLE_MESSAGES):
        return True

    status = _status_of(error)
    if status is not None:
        return status >= 500 or status == RATE_LIMITED_STATUS

    return False


class RetryExecutor:
    """Runs async operations with throttling and retry.

    Usage:
        executor = RetryExecutor(RetryConfig(max_retries=2))
        film = await executor.execute_with_retry(
            lambda: client.get_json("/films/123"),
            "Fetching film 123",
        )
    """

    def __init__(
        self,
        retry_config: Optional[RetryConfig] = None,
        throttle_config: Optional[ThrottleConfig] = None,
        *,
        throttle: Optional[Throttle] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize retry executor.

        Args:
            retry_config: Retry configuration
            throttle_config: Throttle configuration, ignored when throttle is given
            throttle: Pre-built throttle to share the dispatch state of
            sleep: Coroutine used for backoff waits
        """
        self.config = retry_config or RetryConfig()
        self.throttle = throttle or Throttle(throttle_config)
        self._sleep = sleep
        self._queue: deque[QueuedJob] = deque()
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def throttle_config(self) -> ThrottleConfig:
        return self.throttle.config

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[str] = None,
    ) -> T:
        """Run an operation, retrying transient failures with backoff.

        Args:
            operation: Zero-argument callable returning an awaitable
            context: Label used in log and error messages

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If the last allowed attempt failed
            Exception: The original error if it is not retryable
        """
        label = context or "Operation"
        total = self.config.total_attempts
        last_error: Optional[BaseException] = None

        for attempt in range(total):
            await self.throttle.acquire()

            try:
                return await operation()
            except Exception as e:
                last_error = e

                if attempt == self.config.max_retries:
                    break

                if not is_retryable_error(e):
                    logger.warning(f"Non-retryable error in {label}: {e}")
                    raise

                delay = calculate_delay(attempt, self.config)
                logger.warning(
                    f"{label} failed (attempt {attempt + 1}/{total}): {e}. "
                    f"Retrying in {delay:.2f}s"
                )
                await self._sleep(delay)

        logger.error(f"All {total} attempts failed for {label}: {last_error}")
        raise RetryExhaustedError(label, total, last_error) from last_error

    async def queue_request(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[str] = None,
    ) -> T:
        """Submit an operation to the FIFO queue and wait for its outcome.

        Queued operations run strictly one after another; each one goes
        through execute_with_retry before the next one starts.

        Args:
            operation: Zero-argument callable returning an awaitable
            context: Label used in log and error messages

        Returns:
            The operation's result
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        if len(self._queue) >= self.throttle_config.burst_size:
            logger.debug(
                f"Burst of {len(self._queue) + 1} queued requests, serializing"
            )

        self._queue.append((operation, context, future))

        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._process_queue())

        return await future

    async def _process_queue(self) -> None:
        """Run queued operations one at a time until the queue is empty."""
        while self._queue:
            operation, context, future = self._queue.popleft()
            job = asyncio.ensure_future(self.execute_with_retry(operation, context))

            try:
                await asyncio.wait({job})
            except asyncio.CancelledError:
                # The drain itself was cancelled: nobody is left to run the rest
                job.cancel()
                future.cancel()
                self._cancel_queued()
                raise

            if job.cancelled():
                if not future.done():
                    future.cancel()
                continue

            error = job.exception()
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(job.result())

    def _cancel_queued(self) -> None:
        """Cancel every job still waiting in the queue."""
        while self._queue:
            _, context, future = self._queue.popleft()
            logger.warning(f"Queue stopped, cancelling {context or 'Operation'}")
            future.cancel()

    def get_queue_status(self) -> dict[str, Any]:
        """Get a read-only snapshot of queue and throttle state."""
        return {
            "queue_length": len(self._queue),
            "request_count": self.throttle.request_count,
            "last_request_time": self.throttle.last_request_time,
        }


def retry_with_backoff(
    executor: Optional[RetryExecutor] = None,
    context: Optional[str] = None,
):
    """Decorator routing an async function through a RetryExecutor.

    Args:
        executor: Executor to use (default: a new one with default config)
        context: Label for messages (default: the function name)

    Returns:
        Decorated function

    Usage:
        @retry_with_backoff(executor, "Fetching films")
        async def fetch_films():
            ...
    """
    runner = executor or RetryExecutor()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        label = context or func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await runner.execute_with_retry(lambda: func(*args, **kwargs), label)

        wrapper.executor = runner
        return wrapper

    return decorator
