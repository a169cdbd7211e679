"""Bounded polling with backoff.

Used wherever the condition being waited on is observable (a backend field,
a node count). Fixed sleeps are kept only for settle delays with no signal.
"""
import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from src.core.exceptions import WaitTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    condition: Callable[[T], bool],
    *,
    timeout: float,
    interval: float = 0.25,
    backoff: float = 1.5,
    max_interval: float = 2.0,
    description: str = "condition",
) -> T:
    """Call ``fetch`` until ``condition(value)`` holds and return that value.

    Sleeps ``interval`` after each miss, growing by ``backoff`` up to
    ``max_interval``. Raises WaitTimeoutError with the last fetched value
    once ``timeout`` seconds have elapsed.
    """
    deadline = time.monotonic() + timeout
    delay = interval
    attempts = 0
    last_value: T | None = None

    while True:
        attempts += 1
        last_value = await fetch()
        if condition(last_value):
            logger.debug("poll_satisfied", description=description, attempts=attempts)
            return last_value

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.debug("poll_timeout", description=description, attempts=attempts)
            raise WaitTimeoutError(description, timeout, last_value)

        await asyncio.sleep(min(delay, remaining))
        delay = min(delay * backoff, max_interval)
