# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for intervals, timeouts and retry budget
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for every tunable of the readiness gate.
These can be overridden via environment variables, flags, or the
per-target options of a checker descriptor.

Design:
- Immutable dataclass for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional

from core.config.durations import parse_duration


@dataclass(frozen=True)
class CheckDefaults:
    """
    Defaults for checkers and the readiness loop.

    All durations are seconds.
    """
    # Loop
    default_interval: float = 2.0
    max_attempts: int = 0  # 0 = retry until ready or cancelled

    # TCP
    tcp_timeout: float = 2.0

    # HTTP
    http_method: str = "GET"
    http_timeout: float = 2.0
    http_expected_status_codes: str = "200"
    http_skip_tls_verify: bool = False
    http_allow_duplicate_headers: bool = False

    # ICMP
    icmp_read_timeout: float = 2.0
    icmp_write_timeout: float = 2.0

    @classmethod
    def from_env(cls) -> "CheckDefaults":
        """
        Create from environment variables.

        Raises:
            ValueError: A duration or count that is malformed or negative
        """
        return cls(
            default_interval=_env_duration("NEVER_DEFAULT_INTERVAL", "2s"),
            max_attempts=_env_count("NEVER_MAX_ATTEMPTS", "0"),
            tcp_timeout=_env_duration("NEVER_TCP_TIMEOUT", "2s"),
            http_timeout=_env_duration("NEVER_HTTP_TIMEOUT", "2s"),
            icmp_read_timeout=_env_duration("NEVER_ICMP_READ_TIMEOUT", "2s"),
            icmp_write_timeout=_env_duration("NEVER_ICMP_WRITE_TIMEOUT", "2s"),
        )


def _env_duration(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    seconds = parse_duration(raw)
    if seconds < 0:
        raise ValueError(f"{name}: negative duration {raw!r}")
    return seconds


def _env_count(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        number = int(raw)
    except ValueError:
        raise ValueError(f"{name}: invalid integer {raw!r}") from None
    if number < 0:
        raise ValueError(f"{name}: negative value {raw!r}")
    return number


# ============================================================================
# GLOBAL ACCESS
# ============================================================================

_defaults: Optional[CheckDefaults] = None


def get_defaults() -> CheckDefaults:
    """Get the process-wide defaults (read from the environment once)."""
    global _defaults
    if _defaults is None:
        _defaults = CheckDefaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Forget cached defaults (tests that patch the environment)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckDefaults",
    "get_defaults",
    "reset_defaults",
]
