import secrets

import structlog
from fastapi import Depends, Header, Request
from redis.asyncio import Redis

from polylingo.core.config import settings
from polylingo.core.constants import DEFAULT_DEVICE_ID
from polylingo.core.exceptions import RateLimitExceededException, UnauthorizedException
from polylingo.core.redis_client import get_redis

logger = structlog.get_logger(__name__)


def verify_api_key(x_api_key: str | None = Header(default=None)) -> None:
    """
    Validate the shared API key sent by the mobile client.

    Uses constant-time comparison.

    :param x_api_key: Value of the X-API-Key header
    :raises UnauthorizedException: If the key is missing, invalid or not configured
    """
    expected_key = settings.translate_api_secret_key

    if not expected_key:
        logger.warning("translate_api_secret_key_not_configured")
        raise UnauthorizedException("Server configuration error")

    if not x_api_key:
        raise UnauthorizedException("API key required")

    if not secrets.compare_digest(x_api_key.encode("utf-8"), expected_key.encode("utf-8")):
        raise UnauthorizedException("Invalid API key")


def get_client_ip(request: Request) -> str:
    """
    Resolve the client IP, honouring the first X-Forwarded-For hop.
    :param request: FastAPI Request object
    :return: Client IP or "unknown"
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_device_id(x_device_id: str | None = Header(default=None)) -> str:
    """
    Client identity used for daily usage accounting and batch supersession.
    :param x_device_id: Value of the X-Device-Id header
    :return: Device identifier
    """
    return x_device_id.strip() if x_device_id and x_device_id.strip() else DEFAULT_DEVICE_ID


async def enforce_rate_limit(
    client_ip: str = Depends(get_client_ip),
    redis: Redis = Depends(get_redis),
) -> None:
    """
    Fixed-window rate limit per client IP.

    :param client_ip: Resolved client IP
    :param redis: Redis client
    :raises RateLimitExceededException: If the window budget is exhausted
    """
    key = f"ratelimit:{client_ip}"
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, settings.rate_limit_window_seconds)

    if count > settings.rate_limit_max_requests:
        logger.info("rate_limit_exceeded", client_ip=client_ip, count=count)
        raise RateLimitExceededException()
