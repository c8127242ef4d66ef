# ============================================================================
# ICMP CHECKER
# ============================================================================
# STATUS: Infrastructure - ICMP echo probe
# PURPOSE: Ready when the target answers an echo request
# CREATED: 19 OCT 2026
# ============================================================================
"""
ICMP Checker

One attempt = one echo exchange:
1. Open a packet socket for the target's address family
2. Send an echo request with this checker's identifier and the next
   sequence number
3. Read until a packet validates as the matching echo reply, or the
   read deadline passes (other processes' ICMP traffic is skipped)
4. Close the socket, whatever the outcome

The address is resolved once, at construction. An unresolvable address
is a configuration error, not a probe failure.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Optional

from core.context import ReadinessContext
from core.logging import ComponentType, get_logger
from core.contracts import CheckType
from checkers.core import Checker, CheckError, InvalidConfigError
from checkers.protocol import ICMPProtocol, ICMPReplyError, protocol_for, resolve_target
from checkers.registry import register_checker

logger = get_logger(__name__, ComponentType.CHECKER)


@dataclass(frozen=True)
class ICMPConfig:
    """Options for ICMP checks."""
    read_timeout: float = 2.0   # seconds to wait for the matching reply
    write_timeout: float = 2.0  # seconds to wait for the send

    def __post_init__(self):
        if self.read_timeout <= 0:
            raise InvalidConfigError("read timeout must be positive")
        if self.write_timeout <= 0:
            raise InvalidConfigError("write timeout must be positive")


@register_checker(CheckType.ICMP)
class ICMPChecker(Checker):
    """
    ICMP echo check.

    Args:
        protocol: Optional strategy override (tests pass a fake)
    """

    check_type = CheckType.ICMP
    config_class = ICMPConfig

    def __init__(
        self,
        name: str,
        address: str,
        config: Optional[ICMPConfig] = None,
        protocol: Optional[ICMPProtocol] = None,
    ):
        super().__init__(name, address)
        self.config = config or ICMPConfig()
        self._ip = resolve_target(address)
        self._protocol = protocol or protocol_for(self._ip)
        self._identifier = random.getrandbits(16)
        self._sequence = 0

    @property
    def protocol(self) -> ICMPProtocol:
        return self._protocol

    @property
    def identifier(self) -> int:
        return self._identifier

    @property
    def sequence(self) -> int:
        """Sequence number of the most recent attempt."""
        return self._sequence

    def _next_sequence(self) -> int:
        self._sequence = (self._sequence + 1) & 0xFFFF
        return self._sequence

    async def check(self, ctx: ReadinessContext) -> None:
        protocol = self._protocol
        identifier = self._identifier
        sequence = self._next_sequence()
        target = str(self._ip)

        conn = await protocol.listen_packet(ctx, protocol.network, protocol.listen_address)
        try:
            loop = asyncio.get_running_loop()
            request = protocol.make_request(identifier, sequence)

            protocol.set_deadline(loop.time() + ctx.bound(self.config.write_timeout))
            try:
                await conn.write_to(request, target)
            except OSError as e:
                raise CheckError(f"failed to send ICMP echo request to {target}: {e}") from e

            protocol.set_deadline(loop.time() + ctx.bound(self.config.read_timeout))
            last_mismatch: Optional[ICMPReplyError] = None
            while True:
                try:
                    reply, peer = await conn.read_from()
                except TimeoutError as e:
                    if last_mismatch is not None:
                        raise CheckError(
                            f"no matching ICMP echo reply from {target}: {last_mismatch}"
                        ) from last_mismatch
                    raise CheckError(str(e)) from None
                except OSError as e:
                    raise CheckError(f"failed to read ICMP echo reply: {e}") from e

                try:
                    protocol.validate_reply(reply, identifier, sequence)
                except ICMPReplyError as e:
                    logger.debug(f"Skipping ICMP packet from {peer}: {e}")
                    last_mismatch = e
                    continue
                return
        finally:
            protocol.close()

    def close(self) -> None:
        self._protocol.close()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ICMPConfig",
    "ICMPChecker",
]
