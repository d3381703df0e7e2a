"""Tests for resilience module."""

import pytest


def test_resilience_imports():
    """Test that resilience module can be imported."""
    from filmproxy.resilience import (
        RetryConfig,
        RetryExecutor,
        RetryExhaustedError,
        Throttle,
        ThrottleConfig,
        is_retryable_error,
        retry_with_backoff,
    )

    assert retry_with_backoff is not None
    assert RetryExecutor is not None
    assert Throttle is not None
    assert is_retryable_error is not None
