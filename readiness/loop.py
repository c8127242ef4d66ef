# ============================================================================
# READINESS LOOP
# ============================================================================
# STATUS: Core - Per-checker retry state machine
# PURPOSE: Repeat one checker's probe until ready, exhausted, or cancelled
# CREATED: 19 OCT 2026
# ============================================================================
"""
Readiness Loop

State machine driven for exactly one checker:

    PROBING --success--------------------------------> READY
       |
       +--failure--> budget spent? --yes-------------> EXHAUSTED (raises)
                          |
                          no
                          v
                      RETRYING --interval elapsed----> PROBING
                          |
                          +--context cancelled-------> CANCELLED (returns)
                          +--context deadline--------> CANCELLED (raises)

Attempts are strictly sequential: a probe is awaited (including its
socket teardown) before the interval timer starts. Probes in flight are
raced against the context, so shutdown never waits for a slow target.
"""

import asyncio
from typing import Optional

from core.config.durations import format_duration
from core.context import CancelCause, ReadinessContext
from core.contracts import ReadinessOutcome
from core.logging import ComponentType, ContextLogger, get_logger, log_context
from checkers.core import Checker

_logger = get_logger(__name__, ComponentType.LOOP)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MaxAttemptsExceededError(Exception):
    """Raised when a checker spent its whole attempt budget without success."""
    outcome = ReadinessOutcome.EXHAUSTED

    def __init__(self, attempts: int = 0):
        self.attempts = attempts
        super().__init__("max attempts reached")


# ============================================================================
# LOOP
# ============================================================================

async def wait_until_ready(
    ctx: ReadinessContext,
    interval: float,
    checker: Checker,
    max_attempts: int = 0,
    logger: Optional[ContextLogger] = None,
) -> ReadinessOutcome:
    """
    Probe a checker until it succeeds.

    Args:
        ctx: Shared cancellation token
        interval: Seconds to wait between failed attempts
        checker: Probe to run (owned by this loop)
        max_attempts: Attempt budget; 0 means unbounded
        logger: Logger for waiting / not ready / ready events

    Returns:
        READY on success, CANCELLED if the context was cancelled
        cooperatively

    Raises:
        MaxAttemptsExceededError: Budget spent without success
        DeadlineExceededError: Context deadline passed first
    """
    log = logger or _logger

    with log_context(
        target=checker.name,
        type=checker.type,
        address=checker.address,
        interval=format_duration(interval),
        max_attempts=max_attempts,
    ):
        log.info(f"Waiting for {checker.name} to become ready...")

        attempt = 0
        while True:
            attempt += 1
            try:
                await ctx.run(checker.check(ctx))
            except Exception as e:
                if ctx.done:
                    return _context_ended(ctx, log, attempt)
                log.warning(
                    f"{checker.name} is not ready ✗",
                    extra={"error": str(e), "attempt": attempt},
                )
            else:
                log.info(f"{checker.name} is ready ✓", extra={"attempt": attempt})
                return ReadinessOutcome.READY

            if max_attempts > 0 and attempt >= max_attempts:
                raise MaxAttemptsExceededError(attempt)

            if not await _wait_interval(ctx, interval):
                return _context_ended(ctx, log, attempt)


async def _wait_interval(ctx: ReadinessContext, interval: float) -> bool:
    """
    Sleep one interval unless the context ends first.

    Returns:
        True when the interval elapsed, False when the context ended
    """
    try:
        await asyncio.wait_for(ctx.wait(), timeout=interval)
    except asyncio.TimeoutError:
        return True
    return False


def _context_ended(
    ctx: ReadinessContext,
    log: ContextLogger,
    attempt: int,
) -> ReadinessOutcome:
    """CANCELLED for cooperative shutdown; the context error otherwise."""
    if ctx.cause == CancelCause.CANCELLED:
        log.debug("Stopped waiting: context canceled", extra={"attempt": attempt})
        return ReadinessOutcome.CANCELLED
    raise ctx.error()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "MaxAttemptsExceededError",
    "wait_until_ready",
]
