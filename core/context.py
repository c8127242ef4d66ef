# ============================================================================
# READINESS CONTEXT
# ============================================================================
# STATUS: Core - Cancellation token shared by loops and checkers
# PURPOSE: Cooperative cancellation and deadlines for blocking operations
# CREATED: 19 OCT 2026
# ============================================================================
"""
Readiness Context

A cancellation token passed to every blocking operation of the readiness
gate. A context ends for exactly one cause:

- CANCELLED: cooperative shutdown (signal, sibling failure). Loops treat
  this as a normal stop.
- DEADLINE_EXCEEDED: the configured timeout elapsed. Loops report this
  as an error.

Contexts form a tree: cancelling a parent cancels every child with the
same cause. A child never outlives its parent's deadline.

Usage:
    ctx = ReadinessContext(timeout=30.0)
    try:
        await ctx.run(checker.check(ctx))
    finally:
        ctx.close()
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelCause(str, Enum):
    """Why a context ended."""
    CANCELLED = "context canceled"
    DEADLINE_EXCEEDED = "context deadline exceeded"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ContextError(Exception):
    """Base exception raised when an operation outlives its context."""
    cause: CancelCause = CancelCause.CANCELLED

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.cause.value)


class ContextCancelledError(ContextError):
    """The context was cancelled cooperatively."""
    cause = CancelCause.CANCELLED


class DeadlineExceededError(ContextError):
    """The context deadline elapsed."""
    cause = CancelCause.DEADLINE_EXCEEDED


_ERRORS = {
    CancelCause.CANCELLED: ContextCancelledError,
    CancelCause.DEADLINE_EXCEEDED: DeadlineExceededError,
}


# ============================================================================
# CONTEXT
# ============================================================================

class ReadinessContext:
    """
    Cancellation token with an optional deadline.

    Must be created while an event loop is running when a timeout is
    given, because the deadline is scheduled on that loop.
    """

    def __init__(
        self,
        parent: Optional["ReadinessContext"] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize context.

        Args:
            parent: Context whose cancellation propagates to this one
            timeout: Seconds until this context ends with DEADLINE_EXCEEDED
        """
        self._event = asyncio.Event()
        self._cause: Optional[CancelCause] = None
        self._parent = parent
        self._children: List["ReadinessContext"] = []
        self._deadline: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None

        if parent is not None:
            self._deadline = parent._deadline
            if parent.done:
                self.cancel(parent.cause)
            else:
                parent._children.append(self)

        if timeout is not None and not self.done:
            loop = asyncio.get_running_loop()
            deadline = loop.time() + max(timeout, 0.0)
            if self._deadline is None or deadline < self._deadline:
                self._deadline = deadline
                self._timer = loop.call_at(
                    deadline, self.cancel, CancelCause.DEADLINE_EXCEEDED
                )

    @property
    def done(self) -> bool:
        """True once the context has been cancelled for any cause."""
        return self._cause is not None

    @property
    def cause(self) -> Optional[CancelCause]:
        return self._cause

    @property
    def deadline(self) -> Optional[float]:
        """Absolute deadline on the event loop clock, if any."""
        return self._deadline

    def error(self) -> Optional[ContextError]:
        """Exception describing why the context ended, or None."""
        if self._cause is None:
            return None
        return _ERRORS[self._cause]()

    def cancel(self, cause: CancelCause = CancelCause.CANCELLED) -> None:
        """
        End the context. Idempotent: the first cause wins.

        Args:
            cause: CANCELLED for cooperative shutdown, DEADLINE_EXCEEDED
                for timeouts
        """
        if self._cause is not None:
            return
        self._cause = cause
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for child in list(self._children):
            child.cancel(cause)
        self._children.clear()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - asyncio.get_running_loop().time(), 0.0)

    def bound(self, timeout: float) -> float:
        """Clip an operation timeout to the time left in this context."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    async def wait(self) -> None:
        """Block until the context ends."""
        await self._event.wait()

    async def run(self, aw: Awaitable[T]) -> T:
        """
        Race an awaitable against this context.

        If the context ends first, the awaitable is cancelled and awaited
        (so its cleanup runs) before the context error is raised.

        Raises:
            ContextError: The context ended before the awaitable finished
        """
        task = asyncio.ensure_future(aw)
        if self.done:
            await self._abort(task)
            raise self.error()

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await self._abort(task)
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        await self._abort(task)
        raise self.error()

    @staticmethod
    async def _abort(task: "asyncio.Future[Any]") -> None:
        """Cancel a task and wait for its teardown to finish."""
        task.cancel()
        results = await asyncio.gather(task, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.debug(f"Aborted operation raised during teardown: {result}")

    def close(self) -> None:
        """Release the deadline timer and detach from the parent."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)

    def __repr__(self) -> str:
        state = self._cause.value if self._cause else "active"
        return f"ReadinessContext({state})"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CancelCause",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "ReadinessContext",
]
