"""
Shared HTTP plumbing for JSON based provider adapters.

Every transport failure, non-2xx response and undecodable body is turned into
a ProviderError so callers can decide on retry.
"""

from typing import Any

import httpx
import structlog

from polylingo.interfaces.translator import ProviderError

logger = structlog.get_logger(__name__)


class HttpJsonProvider:
    """Base class for adapters talking JSON over a shared httpx.AsyncClient."""

    provider_name = "http"

    def __init__(self, client: httpx.AsyncClient):
        """
        :param client: Shared async HTTP client (owned and closed by the application)
        """
        self.client = client

    async def _request_json(self, method: str, url: str, **kwargs) -> Any:
        """
        Perform a request and decode its JSON body.

        :param method: HTTP method
        :param url: Absolute URL
        :param kwargs: Extra arguments for httpx (params, json, headers)
        :return: Decoded JSON payload
        :raises ProviderError: On transport failure, non-2xx status or invalid JSON
        """
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning("provider_http_error", provider=self.provider_name, status_code=status_code)
            raise ProviderError(f"{self.provider_name} returned HTTP {status_code}", e, status_code)
        except httpx.HTTPError as e:
            logger.warning("provider_transport_error", provider=self.provider_name, error=str(e))
            raise ProviderError(f"{self.provider_name} request failed: {e}", e)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.provider_name} returned a non-JSON response", e, response.status_code)
