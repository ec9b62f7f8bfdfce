import os
from dataclasses import dataclass
from functools import lru_cache

import redis
import redis.asyncio
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis-asyncio")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "express-cache:")
    cache_ttl: int = int(os.getenv("CACHE_TTL", "60"))

    # Conditional request headers
    request_header_name: str = os.getenv("CACHE_REQUEST_HEADER", "if-none-match")
    response_header_name: str = os.getenv("CACHE_RESPONSE_HEADER", "etag")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError(f"CACHE_TTL must be a positive number of seconds, got {self.cache_ttl}")

        if not self.cache_key_prefix:
            raise ValueError("CACHE_KEY_PREFIX must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a synchronous Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def get_async_redis_client() -> redis.asyncio.Redis:
    """Create an asyncio Redis client instance."""
    return redis.asyncio.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
