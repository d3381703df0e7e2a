"""Tests for the upstream HTTP client."""

import httpx
import pytest

from filmproxy.http import HttpClient, HttpError
from filmproxy.resilience.retry import is_retryable_error


def make_client(handler) -> HttpClient:
    return HttpClient(
        base_url="http://films.test",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestHttpClient:
    """Test JSON GET requests."""

    def test_defaults_from_settings(self):
        """Test base URL comes from settings when not given."""
        from filmproxy.config import settings

        client = HttpClient()
        assert client.base_url == settings.api_base_url
        assert client.timeout == settings.http_timeout

    @pytest.mark.asyncio
    async def test_get_json(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"id": "1", "title": "Porco Rosso"}])

        async with make_client(handler) as client:
            data = await client.get_json("/films", params={"limit": 10})

        assert data == [{"id": "1", "title": "Porco Rosso"}]
        assert seen[0].url == "http://films.test/films?limit=10"
        assert seen[0].headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(HttpError) as exc_info:
            await client.get_json("/films")
        await client.aclose()

        error = exc_info.value
        assert error.status == 500
        assert "Internal Server Error" in str(error)
        assert error.url == "http://films.test/films"
        assert is_retryable_error(error) is True

    @pytest.mark.asyncio
    async def test_rate_limited_is_retryable(self):
        client = make_client(lambda request: httpx.Response(429))

        with pytest.raises(HttpError) as exc_info:
            await client.get_json("/films")
        await client.aclose()

        assert exc_info.value.status == 429
        assert is_retryable_error(exc_info.value) is True

    @pytest.mark.asyncio
    async def test_not_found_is_fatal(self):
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(HttpError) as exc_info:
            await client.get_json("/films/missing")
        await client.aclose()

        assert exc_info.value.status == 404
        assert is_retryable_error(exc_info.value) is False

    @pytest.mark.asyncio
    async def test_connect_error_is_retryable(self):
        def handler(request):
            raise httpx.ConnectError("[Errno 111] Refused", request=request)

        client = make_client(handler)

        with pytest.raises(HttpError) as exc_info:
            await client.get_json("/films")
        await client.aclose()

        error = exc_info.value
        assert error.status is None
        assert isinstance(error.__cause__, httpx.ConnectError)
        assert is_retryable_error(error) is True

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        client = make_client(handler)

        with pytest.raises(HttpError, match="Request timeout") as exc_info:
            await client.get_json("/films")
        await client.aclose()

        assert is_retryable_error(exc_info.value) is True

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self):
        client = make_client(lambda request: httpx.Response(200, json={}))

        async with client:
            pass

        assert client.client.is_closed
