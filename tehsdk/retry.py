"""Bounded retry for a single outbound Bot API call.

This is not a rate limiter: it only re-issues one call a few times when the
failure looks transient, waiting ``base_delay * 2**attempt`` seconds (or the
server's ``retry_after``) in between.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tehcore.logger import TehLogger
from tehsdk.exceptions import RemoteAPIError, TransportError

logger = TehLogger.get_logger()

T = TypeVar("T")


def is_retryable_error(exception: Exception) -> bool:
    """True for transport failures, flood-wait (429) and server-side (5xx) errors."""
    if isinstance(exception, TransportError):
        return True
    if isinstance(exception, RemoteAPIError):
        return exception.error_code == 429 or exception.error_code >= 500
    return False


async def call_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    **kwargs: Any,
) -> T:
    """Await ``func(*args, **kwargs)``, retrying transient failures.

    Example::

        await call_with_retry(client.send_message, chat_id, "hi", max_attempts=5)

    Raises:
        The last error once *max_attempts* is exhausted, or the first
        non-retryable error immediately.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            return await func(*args, **kwargs)
        except (TransportError, RemoteAPIError) as exc:
            if not is_retryable_error(exc) or attempt == max_attempts - 1:
                raise
            delay = base_delay * 2 ** attempt
            if isinstance(exc, RemoteAPIError) and exc.retry_after is not None:
                delay = float(exc.retry_after)
            logger.warning(
                "Retrying Bot API call",
                extra={"attempt": attempt + 1, "max_attempts": max_attempts, "delay": delay, "error": str(exc)},
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
