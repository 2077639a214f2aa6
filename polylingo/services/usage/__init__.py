"""Daily usage quota."""

from polylingo.services.usage.redis_usage_gate import RedisUsageGate

__all__ = [
    "RedisUsageGate",
]
