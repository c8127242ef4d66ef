# ============================================================================
# ENTRY POINT TESTS
# ============================================================================
# STATUS: Tests - Process boundary
# PURPOSE: Verify exit codes and the single error line on stderr
# CREATED: 19 OCT 2026
# ============================================================================
"""
Entry Point Tests

Run with:
    pytest tests/test_main.py -v
"""

import asyncio
import logging
import socket
import threading
import pytest
from unittest.mock import patch

from core.config import reset_defaults
from core.context import ReadinessContext
from main import main, run
from services import build_checkers


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def listening_port():
    """Loopback port accepting connections (via the listen backlog)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(16)
        yield sock.getsockname()[1]


@pytest.fixture
def closed_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return port


# ============================================================================
# EXIT CODES
# ============================================================================

class TestMain:
    """Test exit codes and error output."""

    def test_no_checkers(self, capsys):
        assert main(["--log-level", "ERROR"]) == 1
        assert capsys.readouterr().err == "configuration error: no checkers configured\n"

    def test_ready_target(self, listening_port, capsys):
        code = main(["--log-level", "ERROR", f"--tcp.db.address=127.0.0.1:{listening_port}"])
        assert code == 0
        assert capsys.readouterr().err == ""

    def test_exhausted_target(self, closed_port, capsys):
        code = main([
            "--log-level", "ERROR",
            "--max-attempts", "2",
            "--default-interval", "10ms",
            f"--tcp.db.address=127.0.0.1:{closed_port}",
        ])
        assert code == 1
        assert capsys.readouterr().err == "checker 'db' failed: max attempts reached\n"

    def test_unsupported_type(self, capsys):
        assert main(["--log-level", "ERROR", "--udp.dns.address=10.0.0.1:53"]) == 1
        assert capsys.readouterr().err == "configuration error: unsupported check type: udp\n"

    def test_invalid_dynamic_flag(self, capsys):
        assert main(["--tcp.db.method=GET"]) == 1
        assert "flag provided but not defined" in capsys.readouterr().err

    def test_config_file(self, tmp_path, listening_port, capsys):
        path = tmp_path / "checks.yaml"
        path.write_text(
            "default_interval: 10ms\n"
            "checks:\n"
            f"  - {{type: tcp, id: db, address: '127.0.0.1:{listening_port}'}}\n"
        )
        assert main(["--log-level", "ERROR", "--config", str(path)]) == 0

    def test_json_logs(self, listening_port, capsys):
        code = main([
            "--log-format", "json",
            f"--tcp.db.address=127.0.0.1:{listening_port}",
        ])
        assert code == 0
        lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
        assert any('"message": "db is ready' in line for line in lines)


class TestRun:
    """Test the async entry point with a caller-owned context."""

    def test_cancelled_context_is_not_an_error(self, closed_port):
        async def scenario():
            ctx = ReadinessContext()
            asyncio.get_running_loop().call_later(0.05, ctx.cancel)
            await run(
                ["--log-level", "ERROR", f"--tcp.db.address=127.0.0.1:{closed_port}"],
                ctx,
            )

        asyncio.run(scenario())

    def test_checkers_are_built_off_the_event_loop(self, listening_port):
        build_threads = []

        def recording_build(*args):
            build_threads.append(threading.get_ident())
            return build_checkers(*args)

        async def scenario():
            with patch("main.build_checkers", side_effect=recording_build):
                await run(
                    ["--log-level", "ERROR", f"--tcp.db.address=127.0.0.1:{listening_port}"],
                    ReadinessContext(),
                )
            return threading.get_ident()

        loop_thread = asyncio.run(scenario())
        assert len(build_threads) == 1
        assert build_threads[0] != loop_thread


class TestEnvironmentDefaults:
    """Test environment defaults at the process boundary."""

    @pytest.fixture(autouse=True)
    def fresh_defaults(self):
        reset_defaults()
        yield
        reset_defaults()

    def test_negative_env_default_is_configuration_error(self, monkeypatch, capsys):
        monkeypatch.setenv("NEVER_MAX_ATTEMPTS", "-3")
        assert main(["--log-level", "ERROR", "--tcp.db.address=127.0.0.1:1"]) == 1
        assert capsys.readouterr().err == (
            "configuration error: NEVER_MAX_ATTEMPTS: negative value '-3'\n"
        )
