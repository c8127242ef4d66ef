# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# STATUS: Core - Readiness fan-out
# PURPOSE: Run every checker's readiness loop concurrently
# CREATED: 19 OCT 2026
# ============================================================================
"""
Orchestrator Module

Usage:
    from orchestrator import run_all

    ctx = ReadinessContext()
    await run_all(ctx, build_checkers(descriptors, default_interval=2.0))
"""

from .runner import CheckerFailedError, NoCheckersError, run_all

__all__ = [
    "CheckerFailedError",
    "NoCheckersError",
    "run_all",
]
