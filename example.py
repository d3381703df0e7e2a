"""Example script fetching films through the filmproxy resilience layer."""

import asyncio
import logging

from filmproxy import FilmCatalogService
from filmproxy.config import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    """Fetch the featured films twice to show the cache at work."""
    service = FilmCatalogService()

    try:
        logger.info(f"Fetching featured films from {settings.api_base_url}...")
        films = await service.get_main_films()

        for film in films:
            logger.info(f"  {film.title} ({film.release_date}) - {film.director}")

        logger.info("Fetching again (served from cache)...")
        await service.get_main_films()

        status = service.retry.get_queue_status()
        logger.info(f"Requests in current window: {status['request_count']}")
        logger.info(f"Cached entries: {service.cache.size()}")
    finally:
        await service.aclose()


if __name__ == "__main__":
    asyncio.run(main())
