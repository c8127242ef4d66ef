# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by checkers, loop and runner
# PURPOSE: Define check types and readiness outcomes
# CREATED: 19 OCT 2026
# EXPORTS: CheckType, ReadinessOutcome
# ============================================================================
"""
Base contracts for the readiness gate.

These enums cross every boundary of the system:
- Flags / config files (check type names)
- Checker factory (type dispatch)
- Readiness loop (terminal outcome)
"""

from enum import Enum


# ============================================================================
# CHECK TYPES
# ============================================================================

class CheckType(str, Enum):
    """
    Supported probe types.

    The value doubles as the display name reported by Checker.type.
    """
    HTTP = "HTTP"
    TCP = "TCP"
    ICMP = "ICMP"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# READINESS OUTCOMES
# ============================================================================

class ReadinessOutcome(str, Enum):
    """
    Terminal result of one readiness loop.

    State transitions:
        PROBING -> READY
                -> RETRYING -> PROBING
                -> EXHAUSTED
                -> CANCELLED

    Exhaustion is reported by raising MaxAttemptsExceededError, so a loop
    that returns normally yields READY or CANCELLED only.
    """
    READY = "ready"              # Probe succeeded
    EXHAUSTED = "exhausted"      # Retry budget spent
    CANCELLED = "cancelled"      # Context ended before success


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckType",
    "ReadinessOutcome",
]
