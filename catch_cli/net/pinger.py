"""
A minimal ICMP echo probe over a raw socket.
"""

import logging
import socket
import struct
import time
from collections.abc import Callable

from catch_cli.exceptions import ProbeError
from catch_cli.models.stats import PingStats

log = logging.getLogger(__name__)

ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0


def checksum(data: bytes) -> int:
    """RFC 1071 one's complement checksum over 16-bit big-endian words."""
    total = 0
    for i in range(0, len(data) - 1, 2):
        total += (data[i] << 8) | data[i + 1]
    if len(data) % 2:
        total += data[-1] << 8
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def build_echo_request(identifier: int, sequence: int) -> bytes:
    """Builds an 8-byte ICMP echo request header with its checksum filled in."""
    header = struct.pack("!BBHHH", ICMP_ECHO_REQUEST, 0, 0, identifier, sequence)
    csum = checksum(header)
    return struct.pack("!BBHHH", ICMP_ECHO_REQUEST, 0, csum, identifier, sequence)


def parse_echo_reply(packet: bytes) -> tuple[int, int] | None:
    """
    Extracts (identifier, sequence) from a raw IPv4 packet holding an echo reply.

    Returns None for anything that is not an echo reply.
    """
    if len(packet) < 20:
        return None
    ihl = (packet[0] & 0x0F) * 4
    icmp = packet[ihl : ihl + 8]
    if len(icmp) < 8:
        return None
    icmp_type, _code, _csum, identifier, sequence = struct.unpack("!BBHHH", icmp)
    if icmp_type != ICMP_ECHO_REPLY:
        return None
    return identifier, sequence


def _raw_icmp_socket() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)


class Pinger:
    """Sends a series of echo requests and collects round-trip times."""

    def __init__(
        self,
        timeout: float = 2.0,
        identifier: int = 1,
        socket_factory: Callable[[], socket.socket] = _raw_icmp_socket,
    ):
        self.timeout = timeout
        self.identifier = identifier & 0xFFFF
        self._socket_factory = socket_factory

    def ping(
        self,
        host: str,
        count: int = 4,
        on_result: Callable[[int, float | None], None] | None = None,
    ) -> PingStats:
        """
        Pings `host` `count` times, one request at a time.

        Args:
            host: IPv4 address or host name.
            count: Number of echo requests to send.
            on_result: Called after each request with the sequence number and
                the round-trip time in seconds (None on timeout).

        Raises:
            ProbeError: If the host cannot be resolved or the raw socket cannot
                be opened (usually missing privileges).
        """
        try:
            address = socket.gethostbyname(host)
        except OSError as e:
            raise ProbeError(f"Cannot resolve host '{host}': {e}") from e

        try:
            sock = self._socket_factory()
        except PermissionError as e:
            raise ProbeError(
                "Opening a raw ICMP socket requires administrator privileges."
            ) from e
        except OSError as e:
            raise ProbeError(f"Cannot open ICMP socket: {e}") from e

        stats = PingStats(host=address)
        with sock:
            sock.settimeout(self.timeout)
            for seq in range(count):
                rtt = self._probe_once(sock, address, seq & 0xFFFF)
                stats.sent += 1
                if rtt is not None:
                    stats.round_trips.append(rtt)
                if on_result:
                    on_result(seq, rtt)
        return stats

    def _probe_once(self, sock: socket.socket, address: str, seq: int) -> float | None:
        packet = build_echo_request(self.identifier, seq)
        start = time.monotonic()
        try:
            sock.sendto(packet, (address, 0))
        except OSError as e:
            log.debug(f"Send to {address} seq={seq} failed: {e}")
            return None

        deadline = start + self.timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            sock.settimeout(remaining)
            try:
                reply = sock.recv(1024)
            except (socket.timeout, TimeoutError):
                return None
            except OSError as e:
                log.debug(f"Receive from {address} seq={seq} failed: {e}")
                return None
            if parse_echo_reply(reply) == (self.identifier, seq):
                return time.monotonic() - start
