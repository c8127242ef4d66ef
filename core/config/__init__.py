# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides defaults, duration parsing and command-line parsing for the
readiness gate.
"""

from core.config.defaults import (
    CheckDefaults,
    get_defaults,
    reset_defaults,
)
from core.config.durations import parse_duration, format_duration

__all__ = [
    "CheckDefaults",
    "get_defaults",
    "reset_defaults",
    "parse_duration",
    "format_duration",
]
