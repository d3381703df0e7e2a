"""Film catalog access backed by the cache and the retry executor.

Every lookup checks the cache first, fetches through the retry executor on
a miss, and stores the result. Failures that survive the retries are
logged and turned into an empty result for the caller.
"""

import asyncio
import logging
from typing import List, Optional

from .cache import TTLCache
from .config import Settings, settings as default_settings
from .http import HttpClient
from .models import Film
from .resilience.retry import RetryExecutor

logger = logging.getLogger(__name__)

ALL_FILMS_KEY = "films:all"
MAIN_FILMS_KEY = "films:main"

MAIN_FILM_IDS = (
    "ebbb6b7c-945c-41ee-a792-de0e43191bd8",  # Porco Rosso
    "ea660b10-85c4-4ae3-8a5f-41cea3648e3e",  # Kiki's Delivery Service
    "cd3d059c-09f4-4ff3-8d63-bc765a5184fa",  # Howl's Moving Castle
    "58611129-2dbc-4a81-a72f-77ddfc1b1b49",  # My Neighbor Totoro
)


def film_key(film_id: str) -> str:
    return f"film:{film_id}"


class FilmCatalogService:
    """Cached, throttled and retried access to the film catalog."""

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        cache: Optional[TTLCache] = None,
        retry_executor: Optional[RetryExecutor] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize film catalog service.

        Args:
            http_client: Upstream client. If not provided, one is built from settings.
            cache: Result cache. If not provided, uses settings.cache_ttl.
            retry_executor: Executor for upstream calls. If not provided,
                one is built from the retry and throttle settings.
            settings: Settings to build defaults from
        """
        self.settings = settings or default_settings
        self.http = http_client or HttpClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.http_timeout,
        )
        # An empty cache is falsy
        self.cache = cache if cache is not None else TTLCache(self.settings.cache_ttl)
        self.retry = retry_executor or RetryExecutor(
            self.settings.retry_config(),
            self.settings.throttle_config(),
        )

    async def get_film_by_id(self, film_id: str) -> Optional[Film]:
        """Get a single film.

        Args:
            film_id: Upstream film id

        Returns:
            The film, or None if it could not be fetched
        """
        key = film_key(film_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        try:
            data = await self.retry.execute_with_retry(
                lambda: self.http.get_json(f"/films/{film_id}"),
                f"Fetching film {film_id}",
            )
            film = Film.from_api(data)
        except Exception as e:
            logger.error(f"Error fetching film with ID {film_id}: {e}")
            return None

        self.cache.set(key, film)
        return film

    async def get_all_films(self) -> List[Film]:
        """Get every film in the catalog.

        Returns:
            All films, or an empty list if they could not be fetched
        """
        cached = self.cache.get(ALL_FILMS_KEY)
        if cached is not None:
            logger.debug(f"Cache hit for {ALL_FILMS_KEY}")
            return cached

        try:
            data = await self.retry.execute_with_retry(
                lambda: self.http.get_json("/films"),
                "Fetching all films",
            )
            if not isinstance(data, list):
                raise ValueError(f"Expected a list of films, got {type(data).__name__}")
            films = [Film.from_api(item) for item in data]
        except Exception as e:
            logger.error(f"Error fetching all films: {e}")
            return []

        self.cache.set(ALL_FILMS_KEY, films)
        return films

    async def get_main_films(self) -> List[Film]:
        """Get the featured films.

        Films that cannot be fetched are left out.

        Returns:
            Featured films in MAIN_FILM_IDS order
        """
        cached = self.cache.get(MAIN_FILMS_KEY)
        if cached is not None:
            logger.debug(f"Cache hit for {MAIN_FILMS_KEY}")
            return cached

        try:
            results = await asyncio.gather(
                *(self.get_film_by_id(film_id) for film_id in MAIN_FILM_IDS)
            )
        except Exception as e:
            logger.error(f"Error fetching main films: {e}")
            return []

        films = [film for film in results if film is not None]
        self.cache.set(MAIN_FILMS_KEY, films)
        return films

    def invalidate(self) -> None:
        """Drop every cached result."""
        self.cache.clear()

    def cleanup_cache(self) -> int:
        """Sweep expired cache entries.

        Returns:
            Number of entries removed
        """
        return self.cache.cleanup()

    async def aclose(self) -> None:
        await self.http.aclose()
