# ============================================================================
# RUNNER TESTS
# ============================================================================
# STATUS: Tests - Concurrent readiness fan-out
# PURPOSE: Verify first-error cancellation, joins, and end-to-end scenarios
# CREATED: 19 OCT 2026
# ============================================================================
"""
Runner Tests

Covers:
1. Empty input -> NoCheckersError, no task started
2. All checkers ready -> returns normally, every checker closed
3. One checker exhausted -> siblings cancelled promptly, single wrapped error
4. Parent cancel (cooperative) vs parent deadline (error)
5. End-to-end HTTP: 503, 503, 200 against a loopback server
6. End-to-end TCP: closed port with a 3-attempt budget

Run with:
    pytest tests/test_runner.py -v
"""

import asyncio
import logging
import socket
import time
import pytest
from unittest.mock import patch

from checkers import Checker, CheckError
from core.context import DeadlineExceededError, ReadinessContext
from core.contracts import CheckType
from core.models import CheckerDescriptor
from orchestrator import CheckerFailedError, NoCheckersError, run_all
from readiness import MaxAttemptsExceededError
from services import CheckerWithInterval, build_checkers


# ============================================================================
# FIXTURES
# ============================================================================

class RecordingChecker(Checker):
    """Scripted checker that records attempts and close()."""

    check_type = CheckType.TCP

    def __init__(self, name: str, failures: int = 0, hang: bool = False):
        super().__init__(name, f"{name}:80")
        self.failures = failures
        self.hang = hang
        self.calls = 0
        self.closed = False
        self.released = False

    async def check(self, ctx: ReadinessContext) -> None:
        self.calls += 1
        if self.hang:
            try:
                await asyncio.sleep(3600)
            finally:
                self.released = True
        if self.failures < 0 or self.calls <= self.failures:
            raise CheckError(f"{self.name} unavailable")

    def close(self) -> None:
        self.closed = True


def entries(*checkers, interval=0.001):
    return [CheckerWithInterval(checker=c, interval=interval) for c in checkers]


def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def start_status_server(statuses):
    """
    Minimal HTTP/1.1 server answering each request with the next status.

    Returns (server, port, hits) where hits counts handled requests.
    """
    hits = []
    reasons = {200: "OK", 503: "Service Unavailable"}

    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        status = statuses[min(len(hits), len(statuses) - 1)]
        hits.append(status)
        writer.write(
            f"HTTP/1.1 {status} {reasons.get(status, 'Status')}\r\n"
            f"Content-Length: 0\r\nConnection: close\r\n\r\n".encode()
        )
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    return server, server.sockets[0].getsockname()[1], hits


# ============================================================================
# FAN-OUT
# ============================================================================

class TestRunAll:
    """Test the concurrent runner."""

    def test_empty_input(self):
        with patch("orchestrator.runner.asyncio.create_task") as create_task:
            with pytest.raises(NoCheckersError) as exc_info:
                asyncio.run(run_all(ReadinessContext(), []))
        assert str(exc_info.value) == "no checkers to run"
        create_task.assert_not_called()

    def test_all_ready(self):
        a = RecordingChecker("a", failures=2)
        b = RecordingChecker("b", failures=0)

        asyncio.run(run_all(ReadinessContext(), entries(a, b)))

        assert (a.calls, b.calls) == (3, 1)
        assert a.closed and b.closed

    def test_failure_cancels_siblings(self):
        failing = RecordingChecker("db", failures=-1)
        hanging = RecordingChecker("cache", hang=True)
        waiting = RecordingChecker("api", failures=-1)
        started = time.monotonic()

        async def scenario():
            failing_entry = CheckerWithInterval(failing, 0.01)
            others = entries(hanging, waiting, interval=30.0)
            await run_all(ReadinessContext(), [failing_entry] + others, max_attempts=2)

        with pytest.raises(CheckerFailedError) as exc_info:
            asyncio.run(scenario())

        error = exc_info.value
        assert error.name == "db"
        assert isinstance(error.__cause__, MaxAttemptsExceededError)
        assert str(error) == "checker 'db' failed: max attempts reached"
        assert time.monotonic() - started < 5.0
        assert hanging.released
        assert waiting.calls == 1
        assert failing.closed and hanging.closed and waiting.closed

    def test_parent_cancel_is_not_an_error(self):
        a = RecordingChecker("a", failures=-1)
        b = RecordingChecker("b", hang=True)

        async def scenario():
            ctx = ReadinessContext()
            asyncio.get_running_loop().call_later(0.05, ctx.cancel)
            await run_all(ctx, entries(a, b, interval=30.0))

        asyncio.run(scenario())
        assert a.closed and b.closed and b.released

    def test_parent_deadline_is_an_error(self):
        a = RecordingChecker("a", failures=-1)

        async def scenario():
            ctx = ReadinessContext(timeout=0.05)
            await run_all(ctx, entries(a, interval=30.0))

        with pytest.raises(CheckerFailedError) as exc_info:
            asyncio.run(scenario())
        assert isinstance(exc_info.value.__cause__, DeadlineExceededError)
        assert str(exc_info.value) == "checker 'a' failed: context deadline exceeded"

    def test_outer_task_cancellation_joins_loops(self):
        a = RecordingChecker("a", hang=True)

        async def scenario():
            task = asyncio.create_task(run_all(ReadinessContext(), entries(a)))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert a.released and a.closed

    def test_loop_events_use_the_loop_logger(self, caplog):
        caplog.set_level(logging.DEBUG)
        a = RecordingChecker("a", failures=1)

        asyncio.run(run_all(ReadinessContext(), entries(a)))

        loop_records = [r for r in caplog.records if r.name == "readiness.loop"]
        assert [r.getMessage() for r in loop_records] == [
            "Waiting for a to become ready...",
            "a is not ready ✗",
            "a is ready ✓",
        ]
        assert {r.extra["component"] for r in loop_records} == {"loop"}
        runner_messages = [r.getMessage() for r in caplog.records if r.name == "orchestrator.runner"]
        assert runner_messages == ["Started 1 readiness loops"]


# ============================================================================
# END-TO-END
# ============================================================================

class TestEndToEnd:
    """Descriptors -> factory -> runner against loopback targets."""

    def test_http_ready_after_two_unavailable(self, caplog):
        caplog.set_level(logging.INFO, logger="readiness")

        async def scenario():
            server, port, hits = await start_status_server([503, 503, 200])
            async with server:
                checkers = build_checkers(
                    [CheckerDescriptor(
                        type="http",
                        id="api",
                        address=f"http://127.0.0.1:{port}/healthz",
                        interval="10ms",
                    )],
                    default_interval=2.0,
                )
                await run_all(ReadinessContext(), checkers)
            return hits

        hits = asyncio.run(scenario())

        assert hits == [503, 503, 200]
        messages = [r.getMessage() for r in caplog.records if r.name == "readiness.loop"]
        assert messages.count("api is not ready ✗") == 2
        assert messages[-1] == "api is ready ✓"

    def test_tcp_closed_port_exhausts_after_three(self, caplog):
        caplog.set_level(logging.INFO, logger="readiness")
        port = closed_port()

        checkers = build_checkers(
            [CheckerDescriptor(type="tcp", id="db", address=f"127.0.0.1:{port}")],
            default_interval=0.01,
        )

        with pytest.raises(CheckerFailedError) as exc_info:
            asyncio.run(run_all(ReadinessContext(), checkers, max_attempts=3))

        assert isinstance(exc_info.value.__cause__, MaxAttemptsExceededError)
        assert exc_info.value.__cause__.attempts == 3
        warnings = [
            r for r in caplog.records
            if r.name == "readiness.loop" and r.levelno == logging.WARNING
        ]
        assert [r.extra["attempt"] for r in warnings] == [1, 2, 3]
