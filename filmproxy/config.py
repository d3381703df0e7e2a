"""Configuration for filmproxy."""

from pydantic_settings import BaseSettings

from .resilience.retry import RetryConfig
from .resilience.throttle import ThrottleConfig


class Settings(BaseSettings):
    """Application settings."""

    # Upstream film catalog
    api_base_url: str = "https://ghibliapi.vercel.app"
    http_timeout: float = 10.0  # Seconds

    # Cache
    cache_ttl: float = 600.0  # 10 minutes

    # Retry
    max_retries: int = 3
    base_delay: float = 1.0  # Seconds
    max_delay: float = 10.0  # Seconds
    backoff_multiplier: float = 2.0
    jitter: bool = True

    # Throttle (conservative for a public API)
    max_requests_per_second: float = 5
    burst_size: int = 3

    log_level: str = "INFO"

    class Config:
        env_prefix = "FILMPROXY_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def retry_config(self) -> RetryConfig:
        """Build the retry configuration."""
        return RetryConfig(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            backoff_multiplier=self.backoff_multiplier,
            jitter=self.jitter,
        )

    def throttle_config(self) -> ThrottleConfig:
        """Build the throttle configuration."""
        return ThrottleConfig(
            max_requests_per_second=self.max_requests_per_second,
            burst_size=self.burst_size,
        )


settings = Settings()
