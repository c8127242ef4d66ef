# ============================================================================
# CHECKER CORE TYPES
# ============================================================================
# STATUS: Infrastructure - Base class for reachability probes
# PURPOSE: Checker interface and the checker exception hierarchy
# CREATED: 19 OCT 2026
# ============================================================================
"""
Checker Core Types

Defines the interface every probe implements and the errors they raise.

Contract:
- name / type / address are plain accessors, fixed at construction
- check(ctx) performs exactly ONE reachability attempt
- check(ctx) never retries; retrying is the readiness loop's job
- check(ctx) releases every per-attempt resource (sockets, clients)
  before returning, on success and on failure
- success returns normally; failure raises CheckError (or any other
  exception describing the failure)

Errors:
- ConfigurationError family: raised at construction, fatal
- CheckError family: raised by check(), retried by the loop
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from core.context import ReadinessContext
from core.contracts import CheckType


# ============================================================================
# EXCEPTIONS
# ============================================================================

class CheckerError(Exception):
    """Base exception for checker errors."""
    pass


class ConfigurationError(CheckerError):
    """Invalid checker configuration, detected before any check runs."""
    pass


class UnsupportedCheckTypeError(ConfigurationError):
    """Raised when a check type string has no registered checker."""
    def __init__(self, check_type: str):
        self.check_type = check_type
        super().__init__(f"unsupported check type: {check_type}")


class InvalidAddressError(ConfigurationError):
    """Raised when a target address is malformed or cannot be resolved."""
    def __init__(self, address: str, reason: str = "invalid or unresolvable address"):
        self.address = address
        super().__init__(f"{reason}: {address}")


class InvalidConfigError(ConfigurationError):
    """Raised when a checker option is out of range."""
    pass


class CheckError(CheckerError):
    """A single probe failed. Transient: the readiness loop retries it."""
    pass


# ============================================================================
# CHECKER INTERFACE
# ============================================================================

class Checker(ABC):
    """
    Base class for reachability probes.

    Subclass, set check_type, and implement check(). Register with
    @register_checker so the factory can build it from a type string.

    Attributes:
        check_type: Probe type, fixed per subclass
        config_class: Options dataclass used when no config is passed

    Example:
        @register_checker(CheckType.TCP)
        class TCPChecker(Checker):
            check_type = CheckType.TCP
            config_class = TCPConfig

            async def check(self, ctx: ReadinessContext) -> None:
                ...
    """

    check_type: ClassVar[CheckType]
    config_class: ClassVar[type]

    def __init__(self, name: str, address: str):
        self._name = name or address
        self._address = address

    @property
    def name(self) -> str:
        """Display label, defaults to the address."""
        return self._name

    @property
    def type(self) -> str:
        return self.check_type.value

    @property
    def address(self) -> str:
        return self._address

    @abstractmethod
    async def check(self, ctx: ReadinessContext) -> None:
        """
        Perform one reachability attempt.

        Args:
            ctx: Cancellation token; its deadline bounds every I/O timeout

        Raises:
            CheckError: Target not reachable under this configuration
        """
        pass

    def close(self) -> None:
        """Release long-lived resources. Most checkers hold none."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, address={self._address!r})"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CheckerError",
    "ConfigurationError",
    "UnsupportedCheckTypeError",
    "InvalidAddressError",
    "InvalidConfigError",
    "CheckError",
    "Checker",
]
