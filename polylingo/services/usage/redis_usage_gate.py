"""Redis-backed daily usage quota per client."""

from collections.abc import Callable
from datetime import date

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from polylingo.core.constants import DEFAULT_DAILY_USAGE_LIMIT, USAGE_KEY_TTL_SECONDS
from polylingo.interfaces.usage_gate import IUsageGate, UsageGateError
from polylingo.schemas.usage_schemas import UsageStats

logger = structlog.get_logger(__name__)


class RedisUsageGate(IUsageGate):
    """Counts successful units per client and day in a Redis key."""

    def __init__(
        self,
        redis: Redis,
        client_id: str,
        daily_limit: int = DEFAULT_DAILY_USAGE_LIMIT,
        today: Callable[[], date] = date.today,
    ):
        """
        :param redis: Redis client (decode_responses=True)
        :param client_id: Device identifier the quota applies to
        :param daily_limit: Units allowed per day
        :param today: Returns the current day, injectable for tests
        """
        self.redis = redis
        self.client_id = client_id
        self.daily_limit = daily_limit
        self.today = today

    def _key(self) -> str:
        return f"usage:{self.client_id}:{self.today().isoformat()}"

    async def _used_today(self) -> int:
        try:
            value = await self.redis.get(self._key())
        except RedisError as e:
            logger.error("usage_read_failed", client_id=self.client_id, error=str(e))
            raise UsageGateError("Failed to read usage", e)
        return int(value) if value else 0

    async def can_translate(self, unit_cost: int) -> bool:
        used = await self._used_today()
        allowed = used + unit_cost <= self.daily_limit
        if not allowed:
            logger.info("usage_limit_reached", client_id=self.client_id, used=used, requested=unit_cost)
        return allowed

    async def increment_usage(self, successful_count: int) -> None:
        if successful_count <= 0:
            return

        key = self._key()
        try:
            await self.redis.incrby(key, successful_count)
            await self.redis.expire(key, USAGE_KEY_TTL_SECONDS)
        except RedisError as e:
            logger.error("usage_increment_failed", client_id=self.client_id, error=str(e))
            raise UsageGateError("Failed to record usage", e)

        logger.debug("usage_incremented", client_id=self.client_id, count=successful_count)

    async def get_usage_stats(self) -> UsageStats:
        used = await self._used_today()
        return UsageStats(used=used, limit=self.daily_limit, remaining=max(0, self.daily_limit - used))
