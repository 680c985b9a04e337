"""
Resilience Infrastructure for Superior Surf

Every provider call is a short-lived task that may time out, be throttled,
or return garbage. None of that is allowed to escape a single-spot
computation: failures are categorized, logged, and turned into "no data".

Features:
- Error categorization (timeout, rate_limit, api_error, parse_error)
- Per-call timeout wrapper that settles to a default instead of raising
- Minimum-interval rate limiter for throttled providers

No retries: callers re-run the whole pipeline instead.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Awaitable, Optional, Tuple, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorType(Enum):
    """Categories of errors for tracking."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


class RateLimitedError(Exception):
    """Provider answered with a throttling status (HTTP 429)."""

    def __init__(self, provider: str):
        super().__init__(f"{provider} responded 429 Too Many Requests")
        self.provider = provider


def categorize_error(exception: BaseException) -> Tuple[ErrorType, str]:
    """
    Categorize an exception for logging.

    Returns:
        Tuple of (ErrorType, error_message)
    """
    error_msg = str(exception)[:200]  # Truncate long messages

    if isinstance(exception, (httpx.TimeoutException, asyncio.TimeoutError)):
        return (ErrorType.TIMEOUT, f"Timeout: {error_msg or 'no response'}")

    elif isinstance(exception, RateLimitedError):
        return (ErrorType.RATE_LIMIT, error_msg)

    elif isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        if status == 429:
            return (ErrorType.RATE_LIMIT, "HTTP 429 Too Many Requests")
        elif status == 503:
            return (ErrorType.RATE_LIMIT, "HTTP 503 Service Unavailable (quota?)")
        else:
            return (ErrorType.API_ERROR, f"HTTP {status}: {error_msg}")

    elif isinstance(exception, httpx.RequestError):
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    elif isinstance(exception, (json.JSONDecodeError, KeyError, ValueError, TypeError, IndexError)):
        return (ErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    else:
        return (ErrorType.UNKNOWN, error_msg)


async def settle(name: str, awaitable: Awaitable[T], timeout: float, default: T) -> T:
    """
    Await one provider call with its own timeout and return `default` on any failure.

    Sibling calls in the same gather are never affected: the timeout and
    the exception handling are local to this awaitable.
    """
    start = time.monotonic()
    try:
        result = await asyncio.wait_for(awaitable, timeout=timeout)
        logger.debug(f"[settle] {name} finished in {time.monotonic() - start:.2f}s")
        return result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        error_type, error_msg = categorize_error(e)
        if error_type == ErrorType.RATE_LIMIT:
            logger.warning(f"[settle] {name} rate limited, omitting for this cycle: {error_msg}")
        else:
            logger.warning(f"[settle] {name} failed ({error_type.value}): {error_msg}")
        return default


class RateLimiter:
    """
    Serializes calls behind a minimum inter-call interval.

    The last-call timestamp is the only state the fusion core keeps between
    requests; it is written under the lock so concurrent callers queue up.
    """

    def __init__(self, min_interval: float, name: str = "provider"):
        self.min_interval = min_interval
        self.name = name
        self._lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._last_call: Optional[float] = None

    @property
    def last_call(self) -> Optional[float]:
        return self._last_call

    def _loop_lock(self) -> asyncio.Lock:
        # Created on first use; a lock is bound to the loop that first waits on it
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
        return self._lock

    async def wait(self, min_interval: Optional[float] = None) -> float:
        """Block until the interval has elapsed, then stamp the call. Returns seconds slept."""
        interval = self.min_interval if min_interval is None else min_interval
        async with self._loop_lock():
            slept = 0.0
            if self._last_call is not None:
                elapsed = time.monotonic() - self._last_call
                if elapsed < interval:
                    slept = interval - elapsed
                    logger.debug(f"[RateLimiter] {self.name}: sleeping {slept:.2f}s")
                    await asyncio.sleep(slept)
            self._last_call = time.monotonic()
            return slept
