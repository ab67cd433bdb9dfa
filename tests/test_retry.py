"""Tests for the provider retry policy."""

import asyncio

import pytest

from visionpress.core.errors import ProviderError
from visionpress.core.retry import ErrorType, RetryPolicy, classify_error, is_retryable


class Flaky:
    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or ProviderError("temporary outage")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def make_policy(delays, max_attempts=3, base_delay=1.0):
    async def record(delay):
        delays.append(delay)
    return RetryPolicy(max_attempts=max_attempts, base_delay=base_delay, sleep=record)


def test_succeeds_after_transient_failures():
    delays = []
    operation = Flaky(failures=2)
    result = asyncio.run(make_policy(delays).run(operation))
    assert result == "ok"
    assert operation.calls == 3
    assert delays == [1.0, 2.0]


def test_raises_last_error_when_attempts_exhausted():
    delays = []
    operation = Flaky(failures=10)
    with pytest.raises(ProviderError, match="temporary outage"):
        asyncio.run(make_policy(delays, max_attempts=2).run(operation))
    assert operation.calls == 2


def test_non_retryable_error_stops_immediately():
    delays = []
    operation = Flaky(failures=10, error=ProviderError("bad key", retryable=False))
    with pytest.raises(ProviderError):
        asyncio.run(make_policy(delays).run(operation))
    assert operation.calls == 1
    assert delays == []


def test_auth_errors_are_not_retried():
    delays = []
    operation = Flaky(failures=10, error=RuntimeError("Unauthorized: invalid api key"))
    with pytest.raises(RuntimeError):
        asyncio.run(make_policy(delays).run(operation))
    assert operation.calls == 1


def test_linear_backoff_delays():
    policy = RetryPolicy(max_attempts=4, base_delay=0.5)
    assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [0.0, 0.5, 1.0, 1.5]


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.parametrize("message,expected", [
    ("Rate limit exceeded", ErrorType.RATE_LIMIT),
    ("content policy violation", ErrorType.CONTENT_POLICY),
    ("quota exhausted", ErrorType.QUOTA_EXCEEDED),
    ("request timed out", ErrorType.TIMEOUT),
    ("connection reset", ErrorType.NETWORK_ERROR),
    ("something odd", ErrorType.API_ERROR),
])
def test_classify_error(message, expected):
    assert classify_error(RuntimeError(message)) is expected


def test_timeouts_are_retryable():
    assert is_retryable(asyncio.TimeoutError())
    assert not is_retryable(RuntimeError("billing account suspended"))
