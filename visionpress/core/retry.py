"""Retry policy for AI provider calls."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .errors import ProviderError

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    RATE_LIMIT = "rate_limit"
    AUTH_ERROR = "auth_error"
    QUOTA_EXCEEDED = "quota_exceeded"
    CONTENT_POLICY = "content_policy"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    API_ERROR = "api_error"


def classify_error(error: Exception) -> ErrorType:
    """Classify an exception into an error type"""
    if isinstance(error, asyncio.TimeoutError):
        return ErrorType.TIMEOUT
    error_str = str(error).lower()

    if "rate" in error_str and "limit" in error_str:
        return ErrorType.RATE_LIMIT
    elif "content" in error_str and "policy" in error_str:
        return ErrorType.CONTENT_POLICY
    elif "auth" in error_str or "api key" in error_str or "unauthorized" in error_str:
        return ErrorType.AUTH_ERROR
    elif "quota" in error_str or "billing" in error_str:
        return ErrorType.QUOTA_EXCEEDED
    elif "timeout" in error_str or "timed out" in error_str:
        return ErrorType.TIMEOUT
    elif "connection" in error_str or "network" in error_str:
        return ErrorType.NETWORK_ERROR
    else:
        return ErrorType.API_ERROR


def is_retryable(error: Exception) -> bool:
    """Default retry predicate: everything except auth, quota and policy failures."""
    if isinstance(error, ProviderError) and not error.retryable:
        return False
    return classify_error(error) not in (
        ErrorType.AUTH_ERROR, ErrorType.QUOTA_EXCEEDED, ErrorType.CONTENT_POLICY
    )


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with linear backoff.

    The delay before attempt ``n`` (1-based, n > 1) is ``base_delay * (n - 1)``.
    ``sleep`` is injectable so tests can run without waiting.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    retryable: Callable[[Exception], bool] = is_retryable
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def delay_for(self, attempt: int) -> float:
        """Delay before the given 1-based attempt."""
        return self.base_delay * max(0, attempt - 1)

    async def run(self, operation: Callable[[], Awaitable[Any]], description: str = "operation"):
        """
        Run ``operation`` until it succeeds or attempts are exhausted.

        Raises:
            The last exception raised by ``operation``.
        """
        last_error: Optional[Exception] = None
        attempt = 1
        while attempt <= self.max_attempts:
            if attempt > 1:
                delay = self.delay_for(attempt)
                if delay > 0:
                    await self.sleep(delay)
            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning(f"{description} attempt {attempt}/{self.max_attempts} failed: {e}")
                if not self.retryable(e):
                    logger.info(f"{description}: {classify_error(e).value} is not retryable")
                    break
                attempt += 1

        assert last_error is not None
        raise last_error
