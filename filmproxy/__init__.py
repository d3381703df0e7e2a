"""filmproxy: cached, throttled and retried access to a public film catalog."""

__version__ = "0.1.0"

from .cache import TTLCache
from .films import FilmCatalogService
from .models import Film
from .resilience import RetryConfig, RetryExecutor, RetryExhaustedError, ThrottleConfig

__all__ = [
    "TTLCache",
    "FilmCatalogService",
    "Film",
    "RetryConfig",
    "RetryExecutor",
    "RetryExhaustedError",
    "ThrottleConfig",
]
