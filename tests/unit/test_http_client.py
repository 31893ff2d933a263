"""
Unit tests for the shared HTTP client and its retry policy.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
import pytest

from productlookup.services.lookup import (
    LookupHttpClient,
    LookupHttpError,
    LookupPayloadError,
    LookupRateLimitError,
    RetryConfig,
    with_retry,
)
from productlookup.services.lookup.http_client import is_retryable


@pytest.fixture
def no_sleep():
    with patch("productlookup.services.lookup.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestRetry:

    @pytest.mark.parametrize("exc,expected", [
        (aiohttp.ClientConnectionError("Connection reset by peer"), True),
        (asyncio.TimeoutError(), True),
        (OSError("Connection refused"), True),
        (LookupHttpError("HTTP 500: Internal Server Error", status=500), False),
        (LookupRateLimitError("Rate limit exceeded", status=429), False),
        (LookupPayloadError("Invalid JSON payload"), False),
        (ValueError("bad value"), False),
    ])
    def test_is_retryable(self, exc, expected):
        assert is_retryable(exc) is expected

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, no_sleep):
        operation = AsyncMock(side_effect=[aiohttp.ClientConnectionError("reset"), "ok"])

        result = await with_retry(operation)

        assert result == "ok"
        assert operation.await_count == 2
        no_sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, no_sleep):
        operation = AsyncMock(side_effect=aiohttp.ClientConnectionError("reset"))
        config = RetryConfig(max_attempts=4, initial_delay=0.5, max_delay=1.5, backoff_multiplier=2.0)

        with pytest.raises(aiohttp.ClientConnectionError):
            await with_retry(operation, config)

        assert operation.await_count == 4
        assert [call.args[0] for call in no_sleep.await_args_list] == [0.5, 1.0, 1.5]

    @pytest.mark.asyncio
    async def test_http_errors_are_not_retried(self, no_sleep):
        operation = AsyncMock(side_effect=LookupHttpError("HTTP 503", status=503))

        with pytest.raises(LookupHttpError):
            await with_retry(operation)

        assert operation.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self, no_sleep):
        operation = AsyncMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(asyncio.TimeoutError):
            await with_retry(operation, RetryConfig(max_attempts=1))

        assert operation.await_count == 1


def fake_session(status: int, body: str = "", reason: str = "OK"):
    """Session whose get() yields a response with the given status and body."""
    response = Mock(status=status, reason=reason)
    response.text = AsyncMock(return_value=body)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    return session


class TestLookupHttpClient:

    @pytest.fixture
    def client(self):
        return LookupHttpClient(user_agent="ProductLookupTests/1.0", retry=RetryConfig(max_attempts=1))

    @pytest.mark.asyncio
    async def test_json_body(self, client):
        session = fake_session(200, '{"status": 1}')

        with patch.object(client, "_get_session", AsyncMock(return_value=session)):
            status, payload = await client.get_json("https://example.org/x.json", params={"a": 1}, engine="Test")

        assert (status, payload) == (200, {"status": 1})
        session.get.assert_called_once_with("https://example.org/x.json", params={"a": 1})

    @pytest.mark.asyncio
    async def test_not_found_is_returned(self, client):
        with patch.object(client, "_get_session", AsyncMock(return_value=fake_session(404, "Not Found"))):
            assert await client.get_json("https://example.org/x.json") == (404, None)

    @pytest.mark.asyncio
    async def test_empty_body(self, client):
        with patch.object(client, "_get_session", AsyncMock(return_value=fake_session(200, "  "))):
            assert await client.get_json("https://example.org/x.json") == (200, None)

    @pytest.mark.asyncio
    async def test_rate_limit(self, client):
        with patch.object(client, "_get_session", AsyncMock(return_value=fake_session(429, reason="Too Many Requests"))):
            with pytest.raises(LookupRateLimitError) as exc_info:
                await client.get_json("https://example.org/x.json", engine="Test")

        assert exc_info.value.status == 429
        assert exc_info.value.engine == "Test"

    @pytest.mark.asyncio
    async def test_server_error(self, client):
        with patch.object(client, "_get_session", AsyncMock(return_value=fake_session(502, reason="Bad Gateway"))):
            with pytest.raises(LookupHttpError) as exc_info:
                await client.get_json("https://example.org/x.json")

        assert exc_info.value.status == 502
        assert str(exc_info.value) == "HTTP 502: Bad Gateway"

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        with patch.object(client, "_get_session", AsyncMock(return_value=fake_session(200, "<html>"))):
            with pytest.raises(LookupPayloadError):
                await client.get_json("https://example.org/x.json")

    @pytest.mark.asyncio
    async def test_session_headers_and_close(self, client):
        session = await client._get_session()
        try:
            assert session.headers["User-Agent"] == "ProductLookupTests/1.0"
            assert session.timeout.total == 4.0
            assert await client._get_session() is session
        finally:
            await client.close()

        assert session.closed
        assert client._session is None

    def test_default_user_agent_is_contact_string(self):
        client = LookupHttpClient()

        assert client.user_agent == "ProductLookup/1.0 (contact@productlookup.com)"
        assert "http" not in client.user_agent
