"""
Fixed-delay async retry loop.

The explorer enforces a fixed rate-limit window, so the backend clients retry a
bounded number of times with a constant pause between attempts: no jitter and
no exponential growth.

Example
-------
from easy_celestia.utils.retry import aretry_fixed

async def flaky():
    ...

result = await aretry_fixed(flaky, attempts=20, delay=1.1, exceptions=RateLimited)

Notes
-----
- Only exceptions matching `exceptions` are retried; anything else propagates.
- `on_retry` callback receives (attempt_index, exception, sleep_seconds).
- When attempts run out, `RetryError` is raised from the last exception.
"""

from __future__ import annotations

import asyncio
from typing import (Any, Awaitable, Callable, Optional, Sequence, Tuple, Type,
                    TypeVar, Union)

__all__ = [
    "RetryError",
    "aretry_fixed",
]

T = TypeVar("T")


class RetryError(RuntimeError):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, last_exception: BaseException, attempts: int) -> None:
        super().__init__(f"exhausted after {attempts} attempts: {last_exception!r}")
        self.last_exception = last_exception
        self.attempts = attempts


async def aretry_fixed(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    attempts: int = 20,
    delay: float = 1.1,
    exceptions: Union[Type[BaseException], Sequence[Type[BaseException]]] = Exception,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    **kwargs: Any,
) -> T:
    """
    Await `fn(*args, **kwargs)` up to `attempts` times, sleeping `delay`
    seconds between attempts that fail with one of `exceptions`.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    if isinstance(exceptions, type):
        exc_types: Tuple[Type[BaseException], ...] = (exceptions,)
    else:
        exc_types = tuple(exceptions)

    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn(*args, **kwargs)
        except exc_types as exc:
            if attempt >= attempts:
                raise RetryError(exc, attempts=attempt) from exc
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            await asyncio.sleep(delay)
