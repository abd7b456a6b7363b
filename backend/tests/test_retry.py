"""Tests for database retry logic"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from bamboozled.database.exceptions import ConnectionError, DuplicateItemError, QueryError
from bamboozled.database.retry import (
    GENTLE_RETRY,
    STANDARD_RETRY,
    RetryConfig,
    calculate_delay,
    retry_async,
    with_retry
)

FAST = RetryConfig(max_attempts=3, base_delay=0, jitter=False)


class Flaky:
    """Async callable that fails a set number of times before succeeding"""

    def __init__(self, failures, error_factory):
        self.failures = failures
        self.error_factory = error_factory
        self.calls = 0
        self.__name__ = "flaky"

    async def __call__(self, value="ok"):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory()
        return value


def locked():
    return OperationalError("UPDATE users", {}, Exception("database is locked"))


class TestRetryAsync:
    """Test cases for retry_async"""

    async def test_success_first_try(self):
        func = Flaky(0, locked)

        assert await retry_async(func, "done", config=FAST) == "done"
        assert func.calls == 1

    async def test_retries_locked_database(self):
        func = Flaky(2, locked)

        assert await retry_async(func, config=FAST) == "ok"
        assert func.calls == 3

    async def test_gives_up_after_max_attempts(self):
        func = Flaky(5, locked)

        with pytest.raises(ConnectionError) as exc_info:
            await retry_async(func, config=FAST)

        assert func.calls == 3
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_non_retryable_error_raised_immediately(self):
        func = Flaky(5, lambda: IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")))

        with pytest.raises(DuplicateItemError):
            await retry_async(func, config=FAST)

        assert func.calls == 1

    async def test_query_error_not_retried(self):
        func = Flaky(5, lambda: OperationalError("SELECT", {}, Exception("no such column: x")))

        with pytest.raises(QueryError):
            await retry_async(func, config=FAST)

        assert func.calls == 1

    async def test_retries_application_connection_error(self):
        func = Flaky(1, lambda: ConnectionError("Database not connected"))

        assert await retry_async(func, config=FAST) == "ok"
        assert func.calls == 2

    async def test_other_exceptions_propagate(self):
        func = Flaky(1, lambda: ValueError("bad"))

        with pytest.raises(ValueError):
            await retry_async(func, config=FAST)

    async def test_decorator(self):
        calls = []

        @with_retry(FAST)
        async def operation(x):
            calls.append(x)
            if len(calls) < 2:
                raise locked()
            return x * 2

        assert await operation(21) == 42
        assert calls == [21, 21]
        assert operation.__name__ == "operation"


class TestDelays:
    def test_exponential_backoff(self):
        config = RetryConfig(base_delay=0.1, jitter=False)

        assert calculate_delay(1, config) == pytest.approx(0.1)
        assert calculate_delay(2, config) == pytest.approx(0.2)
        assert calculate_delay(3, config) == pytest.approx(0.4)

    def test_delay_capped(self):
        config = RetryConfig(base_delay=1, max_delay=3, jitter=False)
        assert calculate_delay(10, config) == 3

    def test_jitter_stays_within_half(self):
        config = RetryConfig(base_delay=1, jitter=True)
        for _ in range(20):
            assert 0.5 <= calculate_delay(1, config) <= 1.0

    def test_policies(self):
        assert STANDARD_RETRY.max_attempts == 3
        assert GENTLE_RETRY.max_attempts == 2
        assert GENTLE_RETRY.base_delay == 0.5
