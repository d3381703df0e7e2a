"""Async HTTP access to the upstream film catalog using httpx."""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import settings

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """Raised when an upstream request fails."""

    def __init__(self, message: str = "", status: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.status = status
        self.url = url


class HttpClient:
    """Client for JSON GET requests against one base URL."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Upstream base URL. If not provided, uses settings.
            timeout: Request timeout in seconds. If not provided, uses settings.
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a path and decode the JSON body.

        Args:
            path: Path relative to the base URL (e.g., "/films")
            params: Optional query parameters

        Returns:
            Decoded JSON body

        Raises:
            HttpError: On transport failure or non-2xx status
        """
        try:
            response = await self.client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise HttpError(f"Request timeout for GET {path}: {e}", url=path) from e
        except httpx.TransportError as e:
            raise HttpError(f"Network connection error for GET {path}: {e}", url=path) from e

        if response.is_error:
            url = str(response.request.url)
            logger.debug(f"GET {url} returned {response.status_code}")
            raise HttpError(
                f"{response.status_code} {response.reason_phrase} for GET {url}",
                status=response.status_code,
                url=url,
            )

        return response.json()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
