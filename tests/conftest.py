"""Pytest configuration and fixtures for filmproxy tests."""

import pytest
from unittest.mock import AsyncMock, Mock

from filmproxy.resilience.retry import RetryConfig, RetryExecutor
from filmproxy.resilience.throttle import ThrottleConfig


class FakeClock:
    """Manually advanced time source with a matching async sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def use_test_environment(monkeypatch):
    """Ensure all tests use test environment variables."""
    monkeypatch.setenv("FILMPROXY_API_BASE_URL", "http://films.test")
    monkeypatch.delenv("FILMPROXY_MAX_RETRIES", raising=False)


@pytest.fixture
def fake_clock():
    """Deterministic clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def backoff_sleep():
    """Recorder standing in for asyncio.sleep during backoff."""
    return AsyncMock()


@pytest.fixture
def fast_executor(backoff_sleep):
    """Retry executor that never waits on backoff and barely throttles."""

    def build(**retry_overrides):
        options = {"max_retries": 3, "base_delay": 1.0, "max_delay": 30.0, "jitter": False}
        options.update(retry_overrides)
        return RetryExecutor(
            RetryConfig(**options),
            ThrottleConfig(max_requests_per_second=1000),
            sleep=backoff_sleep,
        )

    return build


@pytest.fixture
def film_payload():
    """Upstream JSON for a single film."""

    def build(film_id: str = "58611129-2dbc-4a81-a72f-77ddfc1b1b49", title: str = "My Neighbor Totoro"):
        return {
            "id": film_id,
            "title": title,
            "original_title": "となりのトトロ",
            "description": "Two sisters move to the country with their father.",
            "director": "Hayao Miyazaki",
            "producer": "Hayao Miyazaki",
            "release_date": "1988",
            "running_time": "86",
            "rt_score": "93",
            "image": "https://image.tmdb.org/t/p/w600_and_h900_bestv2/totoro.jpg",
            "movie_banner": "https://image.tmdb.org/t/p/original/totoro-banner.jpg",
        }

    return build


@pytest.fixture
def mock_http_client():
    """Mock upstream HTTP client."""
    client = Mock()
    client.get_json = AsyncMock()
    client.aclose = AsyncMock()
    return client
