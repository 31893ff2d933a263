"""
Shared HTTP client for the lookup engines.

One aiohttp session is reused by every engine; it is safe for concurrent
requests from the same event loop so engines need no locking of their own.

Architecture Pattern : Shared connection pool + Retry with exponential backoff
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

import aiohttp
import structlog

from .interfaces import (
    LookupHttpError,
    LookupPayloadError,
    LookupRateLimitError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_USER_AGENT = "ProductLookup/1.0 (contact@productlookup.com)"


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for transient network failures."""
    max_attempts: int = 2
    initial_delay: float = 0.5
    max_delay: float = 2.0
    backoff_multiplier: float = 2.0


def is_retryable(exc: BaseException) -> bool:
    """Connection failures and timeouts are transient; HTTP answers are not."""
    if isinstance(exc, (LookupHttpError, LookupPayloadError)):
        return False
    if isinstance(exc, (aiohttp.ClientConnectionError, asyncio.TimeoutError)):
        return True
    message = str(exc).lower()
    return any(word in message for word in ("timeout", "connection", "reset", "refused"))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig = RetryConfig(),
    should_retry: Callable[[BaseException], bool] = is_retryable,
) -> T:
    """
    Runs an async operation, retrying transient failures with backoff.

    Args:
        operation: Zero-argument coroutine factory
        config: Retry policy
        should_retry: Predicate deciding whether an exception is transient

    Returns:
        The operation result

    Raises:
        The last exception once attempts are exhausted or it is not retryable
    """
    delay = config.initial_delay
    attempt = 1

    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= config.max_attempts or not should_retry(e):
                raise

            logger.debug(
                "Retrying after transient failure",
                attempt=attempt,
                delay=delay,
                error=str(e),
            )
            await asyncio.sleep(delay)
            delay = min(delay * config.backoff_multiplier, config.max_delay)
            attempt += 1


class LookupHttpClient:
    """
    Thin JSON-over-HTTP client shared by all engines.

    Features :
    - Lazily created aiohttp session with descriptive User-Agent
    - Status mapping: 404 returned to the caller, 429 and other errors raised
    - Retry of connection failures and timeouts
    """

    def __init__(self,
                 user_agent: str = DEFAULT_USER_AGENT,
                 timeout: float = 4.0,
                 retry: RetryConfig = RetryConfig()):
        """
        Args:
            user_agent: User-Agent sent on every request
            timeout: Total timeout of one request attempt in seconds
            retry: Retry policy for transient failures
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.retry = retry

        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Gets or creates the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
            }
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers
            )
        return self._session

    async def close(self):
        """Closes the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get_json(self,
                       url: str,
                       params: Optional[Dict[str, Any]] = None,
                       engine: str = "") -> Tuple[int, Any]:
        """
        Issues a GET request and decodes the JSON body.

        Args:
            url: Absolute URL
            params: Query string parameters
            engine: Calling engine name, for errors and logs

        Returns:
            (status, payload). Payload is None for an empty body or a 404.

        Raises:
            LookupRateLimitError: HTTP 429
            LookupHttpError: Any other status >= 400
            LookupPayloadError: Body is not valid JSON
        """
        async def _request() -> Tuple[int, Any]:
            session = await self._get_session()
            async with session.get(url, params=params) as response:
                if response.status == 404:
                    return response.status, None

                if response.status == 429:
                    raise LookupRateLimitError(
                        "Rate limit exceeded",
                        status=response.status,
                        engine=engine,
                    )

                if response.status >= 400:
                    raise LookupHttpError(
                        f"HTTP {response.status}: {response.reason}",
                        status=response.status,
                        engine=engine,
                    )

                body = await response.text()
                if not body.strip():
                    return response.status, None

                try:
                    return response.status, json.loads(body)
                except ValueError as e:
                    raise LookupPayloadError(
                        f"Invalid JSON payload: {e}",
                        engine=engine,
                        original_error=e,
                    )

        logger.debug("HTTP GET", engine=engine, url=url, params=params)
        return await with_retry(_request, self.retry)
