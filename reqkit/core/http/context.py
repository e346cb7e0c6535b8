"""
Cancellation and deadline signal passed into perform().
"""

import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from reqkit.core.http.exceptions import DeadlineExceededError, RequestCancelledError

T = TypeVar("T")


class RequestContext:
    """
    Caller-owned cancellation signal with an optional deadline.

    The executor checks err() before every attempt and races every send,
    response read and backoff sleep against it. A context can be shared by
    several concurrent calls; cancelling it affects all of them.

    Example:
        ```python
        ctx = RequestContext.with_timeout(5)
        response, body = await descriptor.perform(ctx)
        ```
    """

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute time.monotonic() value after which the context is done
        """
        self.deadline = deadline
        self._cancelled = asyncio.Event()

    @classmethod
    def background(cls) -> "RequestContext":
        """Context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        """Context whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def done(self) -> bool:
        return self.err() is not None

    def err(self) -> Optional[RequestCancelledError]:
        """Return the cancellation error, or None while the context is live."""
        if self._cancelled.is_set():
            return RequestCancelledError("context canceled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return DeadlineExceededError("context deadline exceeded")
        return None

    async def guard(self, aw: Awaitable[T]) -> T:
        """
        Await `aw` unless the context finishes first.

        When cancellation or the deadline wins, the pending work is cancelled
        and err() is raised.
        """
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        # loop timers may fire a hair early; make err() see the deadline
        while self.err() is None:
            await asyncio.sleep(self.remaining() or 0)
        raise self.err()

    async def sleep(self, delay: float) -> None:
        """
        Wait for `delay` seconds unless the context finishes first.

        Returns normally in both cases; callers inspect err() afterwards.
        """
        remaining = self.remaining()
        until_deadline = remaining is not None and remaining <= delay
        if until_deadline:
            delay = remaining
        if delay <= 0 or self._cancelled.is_set():
            return

        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
        except asyncio.TimeoutError:
            # loop timers may fire a hair early; make err() see the deadline
            while until_deadline and self.remaining():
                await asyncio.sleep(self.remaining())
