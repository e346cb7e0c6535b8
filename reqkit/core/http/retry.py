"""
Retry policy: which statuses, methods and errors are worth another attempt,
and how long to wait between attempts.

All predicates are pure; the only side effect here is sleep_backoff().
"""

from typing import Callable, Optional, Protocol, runtime_checkable

import httpx

from reqkit.core.config import DEFAULT_BASE_BACKOFF
from reqkit.core.http.context import RequestContext

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS", "TRACE"})

# httpx transport errors that correspond to a dropped, not refused, connection
TEMPORARY_TRANSPORT_ERRORS = (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)


@runtime_checkable
class TransientError(Protocol):
    """Error that reports whether it was a timeout and whether it is temporary."""

    def is_timeout(self) -> bool: ...

    def is_temporary(self) -> bool: ...


def is_retryable_status(code: int) -> bool:
    # 501 and 505 are deliberately absent: they won't change on retry
    return code in RETRYABLE_STATUS_CODES


def is_idempotent_method(method: str) -> bool:
    return (method or "").strip().upper() in IDEMPOTENT_METHODS


def is_retryable_error(err: Optional[BaseException]) -> bool:
    """
    Decide whether a transport error is transient.

    Errors implementing TransientError are asked directly. httpx transport
    errors carry the same information in their type. Anything else is not
    retryable.
    """
    if err is None:
        return False
    if isinstance(err, TransientError):
        return bool(err.is_timeout() or err.is_temporary())
    if isinstance(err, httpx.TimeoutException):
        return True
    return isinstance(err, TEMPORARY_TRANSPORT_ERRORS)


def backoff_delay(attempt: int, base: float = DEFAULT_BASE_BACKOFF) -> float:
    """
    Delay in seconds before retrying after `attempt` (1-based): base * 2^(attempt-1).

    Grows without a cap and without jitter. Pass a different callable as
    RequestDescriptor.backoff to change the schedule.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return base * (2 ** (attempt - 1))


async def sleep_backoff(
    ctx: RequestContext,
    attempt: int,
    backoff: Callable[[int], float] = backoff_delay
) -> None:
    """Sleep for backoff(attempt) seconds, returning early if ctx finishes."""
    await ctx.sleep(backoff(attempt))
