# ============================================================================
# LOGGING TESTS
# ============================================================================
# STATUS: Tests - Structured logging
# PURPOSE: Verify context fields and both output formats
# CREATED: 19 OCT 2026
# ============================================================================
"""
Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import io
import json
import logging
import pytest

from core.logging import (
    ComponentType,
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_context,
)


@pytest.fixture
def capture():
    """Logger wired to an in-memory stream; returns (adapter, stream, handler)."""
    def _capture(formatter):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(formatter)
        base = logging.getLogger("tests.logging")
        base.handlers[:] = [handler]
        base.setLevel(logging.DEBUG)
        base.propagate = False
        return get_logger("tests.logging", ComponentType.LOOP), stream

    yield _capture
    logging.getLogger("tests.logging").handlers[:] = []


class TestLogContext:
    """Test the context stack."""

    def test_nested_context(self):
        with log_context(target="db", type="TCP"):
            with log_context(address="db:5432", attempt_hint=1):
                context = get_current_context()
                assert context.target == "db"
                assert context.address == "db:5432"
                assert context.extra == {"attempt_hint": 1}
            assert get_current_context().address is None
        assert get_current_context().target is None


class TestFormatters:
    """Test JSON and human output."""

    def test_json_output(self, capture):
        logger, stream = capture(StructuredFormatter(version="1.2.3"))

        with log_context(target="api", type="HTTP", address="http://api/", interval="2s"):
            logger.warning("api is not ready ✗", extra={"attempt": 2, "error": "503"})

        record = json.loads(stream.getvalue())
        assert record["level"] == "WARNING"
        assert record["message"] == "api is not ready ✗"
        assert record["version"] == "1.2.3"
        assert record["target"] == "api"
        assert record["interval"] == "2s"
        assert record["attempt"] == 2
        assert record["error"] == "503"
        assert record["component"] == "loop"

    def test_human_output(self, capture):
        logger, stream = capture(HumanFormatter())

        with log_context(target="db", address="db:5432"):
            logger.info("db is ready ✓", extra={"attempt": 1})

        line = stream.getvalue().strip()
        assert "INFO" in line
        assert "db is ready ✓" in line
        assert "target=db" in line
        assert "address=db:5432" in line
        assert "attempt=1" in line

    def test_human_output_quotes_spaces(self, capture):
        logger, stream = capture(HumanFormatter())
        logger.warning("not ready", extra={"error": "connection refused"})
        assert 'error="connection refused"' in stream.getvalue()
