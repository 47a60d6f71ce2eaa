"""Retry logic with exponential backoff for coroutines."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
    max_delay: float = 60.0,
) -> T:
    """Await a coroutine factory with exponential backoff retry logic.

    Args:
        func: Zero-argument callable returning a fresh awaitable per attempt
        max_retries: Maximum number of retry attempts (0 = single attempt)
        base_delay: Initial delay between retries in seconds
        exponential_base: Base for exponential backoff calculation
        max_delay: Maximum delay between retries in seconds

    Returns:
        Result of the first successful attempt

    Raises:
        Exception: Last exception if all attempts fail
    """
    for attempt in range(max_retries + 1):
        try:
            return await func()
        except Exception as e:
            if attempt == max_retries:
                if max_retries:
                    logger.warning(f"Giving up after {max_retries} retries: {e}")
                raise

            delay = min(base_delay * (exponential_base**attempt), max_delay)
            logger.warning(
                f"Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")
