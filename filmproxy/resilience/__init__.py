"""Resilience layer for outbound film catalog calls.

This module provides:
- Retry with exponential backoff and failure classification
- Request throttling
- A serializing submission queue
"""

from .retry import (
    RetryConfig,
    RetryExecutor,
    RetryExhaustedError,
    calculate_delay,
    is_retryable_error,
    retry_with_backoff,
)
from .throttle import Throttle, ThrottleConfig

__all__ = [
    "RetryConfig",
    "RetryExecutor",
    "RetryExhaustedError",
    "calculate_delay",
    "is_retryable_error",
    "retry_with_backoff",
    "Throttle",
    "ThrottleConfig",
]
