# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Service layer - Checker construction and config files
# PURPOSE: Turn descriptors (flags or YAML) into runnable checkers
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic between the CLI surface and the checkers:
- factory: descriptors -> CheckerWithInterval
- config_file: YAML config file -> descriptors + global settings
"""

from services.factory import CheckerWithInterval, build_checkers, create_http_headers
from services.config_file import ConfigFile, ConfigFileError, load_config_file

__all__ = [
    "CheckerWithInterval",
    "build_checkers",
    "create_http_headers",
    "ConfigFile",
    "ConfigFileError",
    "load_config_file",
]
