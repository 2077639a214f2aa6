"""
Usage gate interface for daily translation quotas.

The gate is consulted before a batch starts and updated once it has finished.
"""

from abc import ABC, abstractmethod

from polylingo.schemas.usage_schemas import UsageStats


class IUsageGate(ABC):
    """Abstract interface for per-client usage accounting."""

    @abstractmethod
    async def can_translate(self, unit_cost: int) -> bool:
        """
        Check whether the quota covers the given number of units.

        :param unit_cost: Number of translation units about to be started
        :return: True if allowed, False if the quota would be exceeded
        """
        pass

    @abstractmethod
    async def increment_usage(self, successful_count: int) -> None:
        """
        Record successfully translated units.

        :param successful_count: Number of units that ended in success
        """
        pass

    @abstractmethod
    async def get_usage_stats(self) -> UsageStats:
        """
        Get today's usage figures.

        :return: Used, limit and remaining counts
        """
        pass


class UsageGateError(Exception):
    """Exception raised when usage accounting fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
