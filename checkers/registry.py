# ============================================================================
# CHECKER REGISTRY
# ============================================================================
# STATUS: Infrastructure - Checker registration and construction
# PURPOSE: Build checkers from a check type string
# CREATED: 19 OCT 2026
# ============================================================================
"""
Checker Registry

Maps check types to checker classes and builds instances.

Design:
- Checker classes register at import time via decorator
- Registry is a simple dict (CheckType -> checker class)
- Fail-fast on duplicate registration
- Type strings are matched case-insensitively ("http", "HTTP")

Usage:
    from checkers import new_checker, parse_check_type

    checker = new_checker("tcp", "db", "db:5432")
    checker = new_checker(CheckType.HTTP, "api", "http://api/healthz",
                          config=HTTPConfig(timeout=5.0))
"""

from typing import Any, Callable, Dict, List, Optional, Type, Union

from core.contracts import CheckType
from core.logging import ComponentType, get_logger
from checkers.core import Checker, UnsupportedCheckTypeError

logger = get_logger(__name__, ComponentType.CHECKER)


# Global registry
_checkers: Dict[CheckType, Type[Checker]] = {}


class DuplicateCheckerError(Exception):
    """Raised when a check type is already registered."""
    def __init__(self, check_type: CheckType):
        self.check_type = check_type
        super().__init__(f"Checker already registered: {check_type}")


def register_checker(
    check_type: CheckType,
) -> Callable[[Type[Checker]], Type[Checker]]:
    """
    Decorator to register a checker class for a check type.

    Args:
        check_type: Type the class handles (must be unique)

    Example:
        @register_checker(CheckType.TCP)
        class TCPChecker(Checker):
            ...
    """
    def decorator(cls: Type[Checker]) -> Type[Checker]:
        if check_type in _checkers and _checkers[check_type] is not cls:
            raise DuplicateCheckerError(check_type)

        cls.check_type = check_type
        _checkers[check_type] = cls
        logger.debug(f"Registered checker: {check_type} -> {cls.__name__}")
        return cls

    return decorator


def parse_check_type(value: Union[str, CheckType]) -> CheckType:
    """
    Parse a check type string, case-insensitively.

    Raises:
        UnsupportedCheckTypeError: Unknown type
    """
    if isinstance(value, CheckType):
        return value
    try:
        return CheckType(str(value).strip().upper())
    except ValueError:
        raise UnsupportedCheckTypeError(str(value)) from None


def get_checker_class(check_type: Union[str, CheckType]) -> Type[Checker]:
    """Look up the class registered for a check type."""
    parsed = parse_check_type(check_type)
    cls = _checkers.get(parsed)
    if cls is None:
        raise UnsupportedCheckTypeError(str(check_type))
    return cls


def new_checker(
    check_type: Union[str, CheckType],
    name: str,
    address: str,
    config: Optional[Any] = None,
    **kwargs: Any,
) -> Checker:
    """
    Build a checker.

    Args:
        check_type: "HTTP", "TCP" or "ICMP" (any case)
        name: Display name (defaults to the address when empty)
        address: Protocol-specific target
        config: Options dataclass for the variant; defaults apply when None
        **kwargs: Variant-specific collaborators (e.g. transport, protocol)

    Raises:
        UnsupportedCheckTypeError: Unknown type
        ConfigurationError: Invalid address or options
    """
    cls = get_checker_class(check_type)
    return cls(name, address, config, **kwargs)


def list_check_types() -> List[CheckType]:
    """Registered check types, in registration order."""
    return list(_checkers)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DuplicateCheckerError",
    "register_checker",
    "parse_check_type",
    "get_checker_class",
    "new_checker",
    "list_check_types",
]
