"""Reusable decorators for cross-cutting concerns."""

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential


def transient_retry(func):
    """
    Retry decorator for best-effort lookups that hit flaky transports.

    Configuration:
    - Max attempts: 2
    - Initial wait: 0.2 seconds
    - Max wait: 1 second
    - Retries on: httpx.TransportError (connect/read failures, not HTTP status codes)
    - Re-raises: Yes (after max attempts)

    Usage:
        @transient_retry
        async def fetch_definitions():
            ...
    """
    return retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )(func)
