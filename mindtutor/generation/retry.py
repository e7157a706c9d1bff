"""
Retry with exponential backoff for generation calls.

Generation failures are assumed to be transient backend hiccups, so every
exception is retried the same way: up to MAX_RETRY extra attempts waiting
400ms, 800ms, 1600ms, then the last error propagates.
"""

import logging
import time
from typing import Callable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRY = 3
BASE_DELAY = 0.4  # seconds


def backoff_delay(retry_count: int, base_delay: float = BASE_DELAY) -> float:
    """Delay before retry number retry_count (0-based): base * 2**n."""
    return base_delay * (2 ** retry_count)


def with_retry(
    fn: Callable[[], T],
    context: str,
    max_retry: int = MAX_RETRY,
    base_delay: float = BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn, retrying on any exception.

    Args:
        fn: Zero-argument callable to run
        context: Label for log messages (usually the cache key)
        max_retry: Extra attempts after the first failure
        base_delay: First backoff delay in seconds
        sleep: Delay function, injectable for tests

    Returns:
        The first successful result of fn

    Raises:
        Exception: Whatever fn raised on its final attempt
    """
    retry_count = 0
    while True:
        try:
            return fn()
        except Exception as e:
            if retry_count >= max_retry:
                logger.error(f"[FAIL] {context} after {max_retry} retries: {e}")
                raise
            delay = backoff_delay(retry_count, base_delay)
            logger.info(
                f"[RETRY] {context} attempt {retry_count + 1}/{max_retry}, "
                f"waiting {delay * 1000:.0f}ms: {e}"
            )
            sleep(delay)
            retry_count += 1
