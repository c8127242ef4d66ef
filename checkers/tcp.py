# ============================================================================
# TCP CHECKER
# ============================================================================
# STATUS: Infrastructure - TCP connect probe
# PURPOSE: Ready when a TCP connection to host:port can be established
# CREATED: 19 OCT 2026
# ============================================================================
"""
TCP Checker

One attempt = one connect. The connection is closed immediately after
it is established; nothing is sent.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

from core.context import ReadinessContext
from core.logging import ComponentType, get_logger
from core.contracts import CheckType
from checkers.core import Checker, CheckError, InvalidAddressError, InvalidConfigError
from checkers.registry import register_checker

logger = get_logger(__name__, ComponentType.CHECKER)


@dataclass(frozen=True)
class TCPConfig:
    """Options for TCP checks."""
    timeout: float = 2.0  # dial timeout, seconds

    def __post_init__(self):
        if self.timeout <= 0:
            raise InvalidConfigError("timeout must be positive")


def split_host_port(address: str) -> Tuple[str, int]:
    """
    Split "host:port" or "[v6addr]:port".

    Raises:
        InvalidAddressError: Missing or invalid port
    """
    host, sep, port = address.strip().rpartition(":")
    if not sep or not host:
        raise InvalidAddressError(address, "missing port in address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise InvalidAddressError(address, "too many colons in address")
    try:
        port_number = int(port)
    except ValueError:
        raise InvalidAddressError(address, "invalid port in address") from None
    if not 0 < port_number < 65536:
        raise InvalidAddressError(address, "invalid port in address")
    return host, port_number


@register_checker(CheckType.TCP)
class TCPChecker(Checker):
    """TCP connect check."""

    check_type = CheckType.TCP
    config_class = TCPConfig

    def __init__(self, name: str, address: str, config: Optional[TCPConfig] = None):
        super().__init__(name, address)
        self.config = config or TCPConfig()
        self._host, self._port = split_host_port(address)

    async def check(self, ctx: ReadinessContext) -> None:
        timeout = ctx.bound(self.config.timeout)
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise CheckError(f"dial tcp {self.address}: i/o timeout") from None
        except OSError as e:
            raise CheckError(f"dial tcp {self.address}: {e.strerror or e}") from e

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # Peer reset during close; the connect itself succeeded
            logger.debug(f"Error closing probe connection to {self.address}: {e}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TCPConfig",
    "TCPChecker",
    "split_host_port",
]
