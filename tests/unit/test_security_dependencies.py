"""Unit tests for API key, client identity and rate limit dependencies."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from polylingo.core.config import settings
from polylingo.core.exceptions import RateLimitExceededException, UnauthorizedException
from polylingo.core.security_dependencies import enforce_rate_limit, get_client_ip, get_device_id, verify_api_key


@pytest.mark.unit
class TestVerifyApiKey:
    def test_valid_key(self, monkeypatch):
        monkeypatch.setattr(settings, "translate_api_secret_key", "secret")

        verify_api_key("secret")

    def test_invalid_key(self, monkeypatch):
        monkeypatch.setattr(settings, "translate_api_secret_key", "secret")

        with pytest.raises(UnauthorizedException) as exc_info:
            verify_api_key("wrong")
        assert exc_info.value.message == "Invalid API key"

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(settings, "translate_api_secret_key", "secret")

        with pytest.raises(UnauthorizedException):
            verify_api_key(None)

    def test_unconfigured_server_rejects_everything(self, monkeypatch):
        monkeypatch.setattr(settings, "translate_api_secret_key", None)

        with pytest.raises(UnauthorizedException) as exc_info:
            verify_api_key("anything")
        assert exc_info.value.message == "Server configuration error"


@pytest.mark.unit
class TestClientIdentity:
    def test_forwarded_for_wins(self):
        request = SimpleNamespace(headers={"x-forwarded-for": "1.2.3.4, 10.0.0.1"}, client=SimpleNamespace(host="10.0.0.2"))
        assert get_client_ip(request) == "1.2.3.4"

    def test_falls_back_to_peer(self):
        request = SimpleNamespace(headers={}, client=SimpleNamespace(host="10.0.0.2"))
        assert get_client_ip(request) == "10.0.0.2"

    def test_device_id_default(self):
        assert get_device_id(None) == "anonymous"
        assert get_device_id("  ") == "anonymous"
        assert get_device_id(" phone-1 ") == "phone-1"


@pytest.mark.unit
class TestRateLimit:
    @pytest.mark.asyncio
    async def test_first_hit_starts_window(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_window_seconds", 900)
        redis = AsyncMock()
        redis.incr.return_value = 1

        await enforce_rate_limit("1.2.3.4", redis)

        redis.incr.assert_awaited_once_with("ratelimit:1.2.3.4")
        redis.expire.assert_awaited_once_with("ratelimit:1.2.3.4", 900)

    @pytest.mark.asyncio
    async def test_over_limit_raises(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_max_requests", 50)
        redis = AsyncMock()
        redis.incr.return_value = 51

        with pytest.raises(RateLimitExceededException):
            await enforce_rate_limit("1.2.3.4", redis)
        redis.expire.assert_not_called()
