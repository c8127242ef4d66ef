# ============================================================================
# CHECKERS MODULE
# ============================================================================
# STATUS: Infrastructure - Reachability probes
# PURPOSE: TCP, HTTP and ICMP checkers behind one interface
# CREATED: 19 OCT 2026
# ============================================================================
"""
Checkers Module

Reachability probes for the readiness gate:
- TCPChecker: connection can be established
- HTTPChecker: request returns an accepted status code
- ICMPChecker: echo request is answered

Architecture:
- Checker: Base class (one attempt per check() call)
- register_checker: Type registry, populated on import
- new_checker: Factory keyed on a case-insensitive type string

Usage:
    from checkers import new_checker

    checker = new_checker("tcp", "db", "db:5432")
    await checker.check(ctx)
"""

from checkers.core import (
    Checker,
    CheckerError,
    CheckError,
    ConfigurationError,
    InvalidAddressError,
    InvalidConfigError,
    UnsupportedCheckTypeError,
)
from checkers.registry import (
    register_checker,
    parse_check_type,
    get_checker_class,
    new_checker,
    list_check_types,
)

# Import checker modules to trigger registration
from checkers.tcp import TCPChecker, TCPConfig
from checkers.http import HTTPChecker, HTTPConfig, parse_status_codes
from checkers.icmp import ICMPChecker, ICMPConfig
from checkers.protocol import ICMPProtocol, ICMPv4, ICMPv6, new_protocol

__all__ = [
    # Core types
    "Checker",
    "CheckerError",
    "CheckError",
    "ConfigurationError",
    "InvalidAddressError",
    "InvalidConfigError",
    "UnsupportedCheckTypeError",
    # Registry
    "register_checker",
    "parse_check_type",
    "get_checker_class",
    "new_checker",
    "list_check_types",
    # Variants
    "TCPChecker",
    "TCPConfig",
    "HTTPChecker",
    "HTTPConfig",
    "parse_status_codes",
    "ICMPChecker",
    "ICMPConfig",
    # ICMP strategies
    "ICMPProtocol",
    "ICMPv4",
    "ICMPv6",
    "new_protocol",
]
