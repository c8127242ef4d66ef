# ============================================================================
# ICMP PROTOCOL STRATEGIES
# ============================================================================
# STATUS: Infrastructure - ICMP echo wire format and packet sockets
# PURPOSE: Build echo requests, validate echo replies, own the raw socket
# CREATED: 19 OCT 2026
# ============================================================================
"""
ICMP Protocol Strategies

Two interchangeable strategies, chosen once per checker by address family:

    ICMPv4  network "ip4:icmp"       request type 8    reply type 0
    ICMPv6  network "ip6:ipv6-icmp"  request type 128  reply type 129

Echo message layout (RFC 792 / RFC 4443):

    0        8        16                31
    +--------+--------+-----------------+
    |  type  |  code  |    checksum     |
    +--------+--------+-----------------+
    |   identifier    |    sequence     |
    +-----------------+-----------------+
    |  payload "HELLO-R-U-THERE" (15)   |
    +-----------------------------------+

ICMPv4 carries an Internet checksum over the whole message. ICMPv6
checksums cover an IPv6 pseudo-header, which the kernel fills in on raw
ICMPv6 sockets, so requests are built with a zero checksum.

Raw sockets normally need root or CAP_NET_RAW. Permission failures
surface as ICMPListenError with permission_denied set.
"""

import asyncio
import ipaddress
import socket
import struct
from abc import ABC
from typing import ClassVar, Dict, Optional, Tuple, Union

from core.context import ReadinessContext
from core.logging import ComponentType, get_logger
from checkers.core import CheckError, InvalidAddressError

logger = get_logger(__name__, ComponentType.CHECKER)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

ECHO_PAYLOAD = b"HELLO-R-U-THERE"
ECHO_HEADER = struct.Struct("!BBHHH")  # type, code, checksum, identifier, sequence
READ_BUFFER_SIZE = 1500


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ICMPError(CheckError):
    """Base exception for ICMP probe failures."""
    pass


class ICMPListenError(ICMPError):
    """Opening the packet socket failed."""
    def __init__(self, network: str, reason: str):
        self.network = network
        super().__init__(f"failed to listen for ICMP packets: listen {network}: {reason}")

    @property
    def permission_denied(self) -> bool:
        """True when the OS refused the raw socket (missing privilege)."""
        return isinstance(self.__cause__, PermissionError)


class ICMPConnectionError(ICMPError):
    """Operation on a packet connection that is absent or closed."""
    pass


class ICMPReplyError(ICMPError):
    """A received packet is not the reply to the outstanding request."""
    pass


class ICMPParseError(ICMPReplyError):
    """The buffer is not a well-formed ICMP message."""
    def __init__(self, version: int, reason: str):
        super().__init__(f"failed to parse ICMPv{version} message: {reason}")


class UnexpectedMessageTypeError(ICMPReplyError):
    """The message is not an echo reply for this address family."""
    def __init__(self, version: int, type_name: str):
        self.type_name = type_name
        super().__init__(f"unexpected ICMPv{version} message type: {type_name}")


class IdentifierMismatchError(ICMPReplyError):
    """An echo reply that belongs to a different exchange."""
    def __init__(self):
        super().__init__("identifier or sequence mismatch")


# ============================================================================
# WIRE HELPERS
# ============================================================================

def internet_checksum(data: bytes) -> int:
    """RFC 1071 one's-complement checksum."""
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def strip_ipv4_header(packet: bytes) -> bytes:
    """Drop the IPv4 header that raw IPv4 sockets deliver with each packet."""
    if len(packet) >= 20 and packet[0] >> 4 == 4:
        header_len = (packet[0] & 0x0F) * 4
        if header_len >= 20 and len(packet) >= header_len:
            return packet[header_len:]
    return packet


# ============================================================================
# PACKET CONNECTION
# ============================================================================

class PacketConn:
    """
    Non-blocking datagram socket with a read/write deadline.

    The deadline is an absolute time on the event loop clock; reads and
    writes fail with TimeoutError once it has passed.
    """

    def __init__(self, sock: socket.socket, network: str):
        self._sock = sock
        self.network = network
        self._deadline: Optional[float] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def set_deadline(self, deadline: Optional[float]) -> None:
        if self._closed:
            raise ICMPConnectionError("use of closed network connection")
        self._deadline = deadline

    def _timeout(self, op: str) -> Optional[float]:
        if self._closed:
            raise ICMPConnectionError("use of closed network connection")
        if self._deadline is None:
            return None
        remaining = self._deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise TimeoutError(f"{op} {self.network}: i/o timeout")
        return remaining

    async def write_to(self, data: bytes, address: str) -> int:
        timeout = self._timeout("write")
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(loop.sock_sendto(self._sock, data, (address, 0)), timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"write {self.network}: i/o timeout") from None
        return len(data)

    async def read_from(self, bufsize: int = READ_BUFFER_SIZE) -> Tuple[bytes, str]:
        timeout = self._timeout("read")
        loop = asyncio.get_running_loop()
        try:
            data, peer = await asyncio.wait_for(
                loop.sock_recvfrom(self._sock, bufsize), timeout
            )
        except asyncio.TimeoutError:
            raise TimeoutError(f"read {self.network}: i/o timeout") from None
        if self._sock.family == socket.AF_INET:
            data = strip_ipv4_header(data)
        return data, peer[0]

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._sock.close()


_NETWORKS: Dict[str, Tuple[int, int]] = {
    "ip4:icmp": (socket.AF_INET, socket.IPPROTO_ICMP),
    "ip6:ipv6-icmp": (socket.AF_INET6, socket.IPPROTO_ICMPV6),
}


# ============================================================================
# STRATEGIES
# ============================================================================

class ICMPProtocol(ABC):
    """
    Wire format and socket lifecycle for one address family.

    Holds at most one open PacketConn. The ICMP checker opens it at the
    start of each attempt and closes it before returning.
    """

    version: ClassVar[int]
    network_name: ClassVar[str]
    listen_address: ClassVar[str]
    request_type: ClassVar[int]
    reply_type: ClassVar[int]
    type_names: ClassVar[Dict[int, str]]

    def __init__(self, conn: Optional[PacketConn] = None):
        self.conn = conn

    @property
    def network(self) -> str:
        return self.network_name

    def checksum(self, message: bytes) -> int:
        return internet_checksum(message)

    def make_request(self, identifier: int, sequence: int) -> bytes:
        """Serialize an echo request (always 8 + 15 = 23 bytes)."""
        header = ECHO_HEADER.pack(
            self.request_type, 0, 0, identifier & 0xFFFF, sequence & 0xFFFF
        )
        message = header + ECHO_PAYLOAD
        checksum = self.checksum(message)
        return message[:2] + struct.pack("!H", checksum) + message[4:]

    def type_name(self, message_type: int) -> str:
        return self.type_names.get(message_type, f"type {message_type}")

    def validate_reply(self, reply: bytes, identifier: int, sequence: int) -> None:
        """
        Check that a buffer is the echo reply to (identifier, sequence).

        Raises:
            ICMPParseError: Too short to be an ICMP (echo) message
            UnexpectedMessageTypeError: Not an echo reply for this family
            IdentifierMismatchError: Echo reply for another exchange
        """
        # Every ICMP message carries a 4-byte rest-of-header after the checksum
        if len(reply) < ECHO_HEADER.size:
            raise ICMPParseError(self.version, "message too short")

        message_type = reply[0]
        if message_type != self.reply_type:
            raise UnexpectedMessageTypeError(self.version, self.type_name(message_type))

        _, _, _, got_identifier, got_sequence = ECHO_HEADER.unpack_from(reply)
        if got_identifier != (identifier & 0xFFFF) or got_sequence != (sequence & 0xFFFF):
            raise IdentifierMismatchError()

    async def listen_packet(
        self,
        ctx: Optional[ReadinessContext],
        network: str,
        address: str,
    ) -> PacketConn:
        """
        Open a packet socket for receiving ICMP replies.

        Args:
            ctx: Cancellation token (checked before blocking on DNS)
            network: "ip4:icmp" or "ip6:ipv6-icmp"
            address: Local address to bind ("" binds the wildcard)

        Raises:
            ICMPListenError: Unknown network, lookup failure, or the OS
                refused the raw socket
        """
        family_proto = _NETWORKS.get(network)
        if family_proto is None:
            raise ICMPListenError(network, f"unknown network {network}")
        family, proto = family_proto

        if ctx is not None and ctx.done:
            raise ctx.error()

        loop = asyncio.get_running_loop()
        host = address or self.listen_address
        try:
            infos = await loop.getaddrinfo(host, None, family=family)
        except socket.gaierror as e:
            raise ICMPListenError(network, f"lookup {host}: {e.strerror}") from e

        try:
            sock = socket.socket(family, socket.SOCK_RAW, proto)
        except OSError as e:
            raise ICMPListenError(network, f"socket: {e.strerror or e}") from e

        try:
            sock.setblocking(False)
            sock.bind(infos[0][4])
        except OSError as e:
            sock.close()
            raise ICMPListenError(network, f"bind {host}: {e.strerror or e}") from e

        self.conn = PacketConn(sock, network)
        logger.debug(f"Opened {network} packet socket bound to {host}")
        return self.conn

    def set_deadline(self, deadline: Optional[float]) -> None:
        """
        Apply a read/write deadline (event loop clock) to the connection.

        Raises:
            ICMPConnectionError: No connection opened yet, or already closed
        """
        if self.conn is None:
            raise ICMPConnectionError("no ICMP connection")
        self.conn.set_deadline(deadline)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()


class ICMPv4(ICMPProtocol):
    """ICMP for IPv4 targets."""

    version = 4
    network_name = "ip4:icmp"
    listen_address = "0.0.0.0"
    request_type = 8
    reply_type = 0
    type_names = {
        0: "echo reply",
        3: "destination unreachable",
        4: "source quench",
        5: "redirect",
        8: "echo",
        9: "router advertisement",
        10: "router solicitation",
        11: "time exceeded",
        12: "parameter problem",
        13: "timestamp",
        14: "timestamp reply",
        42: "extended echo request",
        43: "extended echo reply",
    }


class ICMPv6(ICMPProtocol):
    """ICMP for IPv6 targets."""

    version = 6
    network_name = "ip6:ipv6-icmp"
    listen_address = "::"
    request_type = 128
    reply_type = 129
    type_names = {
        1: "destination unreachable",
        2: "packet too big",
        3: "time exceeded",
        4: "parameter problem",
        128: "echo request",
        129: "echo reply",
        130: "multicast listener query",
        131: "multicast listener report",
        132: "multicast listener done",
        133: "router solicitation",
        134: "router advertisement",
        135: "neighbor solicitation",
        136: "neighbor advertisement",
        137: "redirect message",
    }

    def checksum(self, message: bytes) -> int:
        # Kernel computes the pseudo-header checksum on raw ICMPv6 sockets
        return 0


# ============================================================================
# SELECTION
# ============================================================================

def resolve_target(address: str) -> IPAddress:
    """
    Resolve a hostname or IP literal, preferring IPv4.

    Raises:
        InvalidAddressError: Malformed or unresolvable address
    """
    text = address.strip()
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    if not text:
        raise InvalidAddressError(address)

    try:
        return ipaddress.ip_address(text)
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(text, None, type=socket.SOCK_DGRAM)
    except (OSError, UnicodeError):
        raise InvalidAddressError(address) from None

    for family in (socket.AF_INET, socket.AF_INET6):
        for info in infos:
            if info[0] == family:
                return ipaddress.ip_address(info[4][0].split("%", 1)[0])
    raise InvalidAddressError(address)


def protocol_for(ip: IPAddress) -> ICMPProtocol:
    """Strategy for an already-resolved address."""
    if ip.version == 4:
        return ICMPv4()
    return ICMPv6()


def new_protocol(address: str) -> ICMPProtocol:
    """Resolve an address and pick the matching strategy."""
    return protocol_for(resolve_target(address))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ECHO_PAYLOAD",
    "ICMPError",
    "ICMPListenError",
    "ICMPConnectionError",
    "ICMPReplyError",
    "ICMPParseError",
    "UnexpectedMessageTypeError",
    "IdentifierMismatchError",
    "internet_checksum",
    "strip_ipv4_header",
    "PacketConn",
    "ICMPProtocol",
    "ICMPv4",
    "ICMPv6",
    "resolve_target",
    "protocol_for",
    "new_protocol",
]
