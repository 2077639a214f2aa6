"""Redis client for usage quotas and rate limiting."""

import structlog
from redis.asyncio import Redis

from polylingo.core.config import settings

logger = structlog.get_logger(__name__)

redis_client: Redis | None = None


async def create_redis_client() -> None:
    """
    Create Redis client on FastAPI startup.

    A failed connection leaves the client unset; quota-gated routes then fail fast.
    """
    global redis_client

    logger.info("redis_client_initializing", redis_url=settings.redis_url)

    try:
        redis_client = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await redis_client.ping()
        logger.info("redis_client_created", redis_url=settings.redis_url)
    except Exception as e:
        logger.error("redis_client_creation_failed", error=str(e))
        redis_client = None


async def close_redis_client() -> None:
    """Close Redis client on FastAPI shutdown."""
    global redis_client

    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("redis_client_closed")


def get_redis() -> Redis:
    """
    Dependency injection for Redis client.

    Used for daily usage counters and per-IP rate limiting.

    :raises RuntimeError: If Redis client is not initialized
    :return: Redis client instance
    """
    if redis_client is None:
        raise RuntimeError("Redis client not initialized. Ensure create_redis_client() was called on startup.")

    return redis_client
