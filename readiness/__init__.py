# ============================================================================
# READINESS MODULE
# ============================================================================
# STATUS: Core - Readiness loop
# PURPOSE: Export the per-checker retry loop
# CREATED: 19 OCT 2026
# ============================================================================

from readiness.loop import MaxAttemptsExceededError, wait_until_ready

__all__ = [
    "MaxAttemptsExceededError",
    "wait_until_ready",
]
