"""Retry logic for database operations.

SQLite reports a busy writer as ``database is locked``; those errors are mapped
to ``ConnectionError`` and retried with exponential backoff. Everything else is
converted to the matching ``DatabaseError`` and raised straight away.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError

from .exceptions import ConnectionError, handle_sqlalchemy_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Backoff parameters for one class of operation"""
    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 5.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = (ConnectionError,)


STANDARD_RETRY = RetryConfig()
GENTLE_RETRY = RetryConfig(max_attempts=2, base_delay=0.5)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Seconds to wait before the given (1-based) attempt is retried"""
    delay = min(config.base_delay * (config.exponential_base ** (attempt - 1)), config.max_delay)
    if config.jitter:
        delay *= 0.5 + random.random() * 0.5
    return delay


async def retry_async(
    func: Callable[..., Awaitable[Any]],
    *args,
    config: RetryConfig = STANDARD_RETRY,
    **kwargs
) -> Any:
    """Await ``func`` until it succeeds, a non-retryable error occurs, or attempts run out"""
    attempt = 1
    while True:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            error: Exception = handle_sqlalchemy_error(e)
            error.__cause__ = e
            if not isinstance(error, config.retryable_exceptions):
                raise error
        except config.retryable_exceptions as e:
            error = e

        if attempt >= config.max_attempts:
            logger.error(f"Max retry attempts ({config.max_attempts}) exceeded for {func.__name__}")
            raise error

        delay = calculate_delay(attempt, config)
        logger.warning(
            f"Attempt {attempt}/{config.max_attempts} failed for {func.__name__}: {error}. "
            f"Retrying in {delay:.2f}s..."
        )
        await asyncio.sleep(delay)
        attempt += 1


def with_retry(config: RetryConfig = STANDARD_RETRY):
    """Decorator form of ``retry_async``"""

    def decorator(func: Callable[..., Awaitable[Any]]):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry_async(func, *args, config=config, **kwargs)
        return wrapper

    return decorator


def with_standard_retry(func: Callable[..., Awaitable[Any]]):
    """Retry policy for regular reads and writes"""
    return with_retry(STANDARD_RETRY)(func)


def with_gentle_retry(func: Callable[..., Awaitable[Any]]):
    """Retry policy for bulk operations such as export and import"""
    return with_retry(GENTLE_RETRY)(func)
