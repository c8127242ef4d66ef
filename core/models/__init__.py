# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for Pydantic models
# CREATED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models validating the configuration input of the readiness gate.
"""

from core.models.descriptor import (
    CheckerDescriptor,
    COMMON_OPTIONS,
    TYPE_OPTIONS,
    describe_validation_error,
    is_hostname_like,
)

__all__ = [
    "CheckerDescriptor",
    "COMMON_OPTIONS",
    "TYPE_OPTIONS",
    "describe_validation_error",
    "is_hostname_like",
]
