# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging for every readiness loop
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Provides structured logging for the readiness gate, either human-readable
(default) or JSON lines for log aggregation.

Features:
- Component-based loggers
- Contextual fields (target, type, address, interval, max_attempts)
- JSON output for log aggregation
- Context is stored per asyncio task, so concurrent loops never see
  each other's fields

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("readiness.loop")

    with log_context(target="api", type="HTTP", address="http://api:8080"):
        logger.warning("api is not ready", extra={"attempt": 3})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, IO, Optional, Tuple, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    CHECKER = "checker"
    LOOP = "loop"
    RUNNER = "runner"
    FACTORY = "factory"
    CLI = "cli"


@dataclass
class LogContext:
    """
    Context for structured logging.

    One context per readiness loop; mirrors the attributes every event
    of that loop carries.
    """
    target: Optional[str] = None
    type: Optional[str] = None
    address: Optional[str] = None
    interval: Optional[str] = None
    max_attempts: Optional[int] = None
    component: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


# Per-task context storage (asyncio copies the current context into new tasks)
_context_stack: ContextVar[Tuple[LogContext, ...]] = ContextVar(
    "log_context_stack", default=()
)


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _context_stack.get()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Args:
        **kwargs: Context fields to add (unknown keys go to extra)

    Example:
        with log_context(target="db", type="TCP", address="db:5432"):
            logger.info("Waiting for db to become ready...")
    """
    parent = get_current_context()
    known = {"target", "type", "address", "interval", "max_attempts", "component"}
    extra = {k: v for k, v in kwargs.items() if k not in known and k != "extra"}
    extra.update(kwargs.get("extra", {}))

    new_context = LogContext(
        target=kwargs.get("target", parent.target),
        type=kwargs.get("type", parent.type),
        address=kwargs.get("address", parent.address),
        interval=kwargs.get("interval", parent.interval),
        max_attempts=kwargs.get("max_attempts", parent.max_attempts),
        component=kwargs.get("component", parent.component),
        extra={**parent.extra, **extra},
    )

    token = _context_stack.set(_context_stack.get() + (new_context,))
    try:
        yield new_context
    finally:
        _context_stack.reset(token)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_source: bool = False,
        version: Optional[str] = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_source = include_source
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        if self.include_level:
            log_data["level"] = record.levelname

        if self.include_logger:
            log_data["logger"] = record.name

        if self.version:
            log_data["version"] = self.version

        log_data["message"] = record.getMessage()

        # Context and per-event attributes are merged by ContextLogger
        if hasattr(record, "extra") and record.extra:
            log_data.update(record.extra)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for terminals.

    Renders attributes inline as key=value pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        attrs = ""
        if hasattr(record, "extra") and record.extra:
            attrs = " " + " ".join(
                f"{key}={_quote(value)}" for key, value in record.extra.items()
            )

        result = f"{timestamp} {level} {message}{attrs}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


def _quote(value: Any) -> str:
    text = str(value)
    if not text or any(ch in text for ch in ' "='):
        return json.dumps(text, ensure_ascii=False)
    return text


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes the current task's context in all log messages.
    """

    def process(self, msg, kwargs):
        """Process log record to include context."""
        context = get_current_context()

        extra = context.to_dict()
        if self.extra and self.extra.get("component") and "component" not in extra:
            extra["component"] = self.extra["component"]
        extra.update(kwargs.get("extra", {}))

        # Store as attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "readiness.loop")
        component: Optional component type for categorization

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    component_value = component.value if component is not None else None
    return ContextLogger(base_logger, {"component": component_value})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream: Optional[IO[str]] = None,
    version: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (for log aggregation)
        stream: Output stream (defaults to stdout)
        version: Version stamped on every JSON record
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output:
        formatter: logging.Formatter = StructuredFormatter(version=version)
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
