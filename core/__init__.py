# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts and the cancellation context
# CREATED: 19 OCT 2026
# ============================================================================

from core.contracts import CheckType, ReadinessOutcome
from core.context import (
    CancelCause,
    ContextError,
    ContextCancelledError,
    DeadlineExceededError,
    ReadinessContext,
)

__all__ = [
    # Enums
    "CheckType",
    "ReadinessOutcome",
    "CancelCause",
    # Context
    "ReadinessContext",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
]
