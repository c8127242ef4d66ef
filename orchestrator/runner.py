# ============================================================================
# READINESS RUNNER
# ============================================================================
# STATUS: Core - Concurrent fan-out of readiness loops
# PURPOSE: Wait for every checker; first failure stops the rest
# CREATED: 19 OCT 2026
# ============================================================================
"""
Readiness Runner

Runs one readiness loop per checker, all at once, sharing one derived
context:

    run_all(ctx, checkers)
        |
        +-- group = ReadinessContext(parent=ctx)
        +-- task per checker: wait_until_ready(group, interval, checker)
        |       failure -> record first error, group.cancel()
        |       always  -> checker.close()
        +-- join every task
        +-- raise the first recorded error (wrapped with the checker name)

Sibling loops see the cooperative cancel and return CANCELLED, so only
the checker that actually failed is reported.
"""

import asyncio
from typing import List, Optional, Sequence

from core.context import ReadinessContext
from core.logging import ComponentType, ContextLogger, get_logger
from readiness.loop import wait_until_ready
from services.factory import CheckerWithInterval

_logger = get_logger(__name__, ComponentType.RUNNER)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class NoCheckersError(Exception):
    """Raised when run_all is given nothing to wait for."""
    def __init__(self):
        super().__init__("no checkers to run")


class CheckerFailedError(Exception):
    """A checker's loop ended in error. __cause__ holds the underlying error."""
    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"checker '{name}' failed: {cause}")
        self.__cause__ = cause


# ============================================================================
# RUNNER
# ============================================================================

async def run_all(
    ctx: ReadinessContext,
    checkers: Sequence[CheckerWithInterval],
    max_attempts: int = 0,
    logger: Optional[ContextLogger] = None,
) -> None:
    """
    Wait until every checker is ready.

    Args:
        ctx: Parent context (signals, overall deadline)
        checkers: Checkers with their intervals; each is closed on exit
        max_attempts: Per-checker attempt budget; 0 means unbounded
        logger: Logger passed to every loop (each loop falls back to its own)

    Raises:
        NoCheckersError: Empty input; no task is started
        CheckerFailedError: First loop that ended in error
    """
    if not checkers:
        raise NoCheckersError()

    log = logger or _logger
    group = ReadinessContext(parent=ctx)
    failures: List[CheckerFailedError] = []

    async def run_one(entry: CheckerWithInterval) -> None:
        checker = entry.checker
        try:
            await wait_until_ready(group, entry.interval, checker, max_attempts, logger)
        except Exception as e:
            failures.append(CheckerFailedError(checker.name, e))
            group.cancel()
        finally:
            checker.close()

    tasks = [
        asyncio.create_task(run_one(entry), name=f"readiness:{entry.checker.name}")
        for entry in checkers
    ]
    log.debug(f"Started {len(tasks)} readiness loops")

    try:
        await asyncio.wait(tasks)
    except asyncio.CancelledError:
        group.cancel()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    finally:
        group.close()

    if failures:
        raise failures[0]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "NoCheckersError",
    "CheckerFailedError",
    "run_all",
]
