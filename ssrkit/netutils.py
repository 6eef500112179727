"""Socket address helpers: parsing, resolution, ordering and socket options."""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
import time
from dataclasses import dataclass
from typing import Any

__all__ = [
    "INET_SIZE",
    "INET6_SIZE",
    "ResolveError",
    "SocketAddress",
    "bind_to_address",
    "get_sockaddr",
    "set_interface",
    "set_reuseport",
    "sockaddr_cmp",
    "sockaddr_cmp_addr",
    "validate_hostname",
]

log = logging.getLogger(__name__)

INET_SIZE = 4
"""Byte size of an IPv4 address."""
INET6_SIZE = 16
"""Byte size of an IPv6 address."""

_SO_REUSEPORT = getattr(socket, "SO_REUSEPORT", 15)
_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_IFNAMSIZ = 16
_IFREQ_SIZE = 40
_RESOLVE_ATTEMPTS = 7
_MAX_HOSTNAME = 255
_MAX_LABEL = 63
_VALID_LABEL_CHARS = frozenset(
    "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
)
_ADDRESS_SIZES = {int(socket.AF_INET): INET_SIZE, int(socket.AF_INET6): INET6_SIZE}
_LEADING_INT = re.compile(r"[+-]?\d+")


class ResolveError(OSError):
    """Raised when a host name cannot be resolved to a usable address."""


@dataclass(frozen=True)
class SocketAddress:
    """An IPv4 or IPv6 socket address: family, packed address and port."""

    family: int
    address: bytes
    port: int = 0

    def __post_init__(self) -> None:
        expected = _ADDRESS_SIZES.get(int(self.family))
        if expected is not None and len(self.address) != expected:
            raise ValueError(
                f"address of family {self.family!r} must be {expected} bytes, "
                f"got {len(self.address)}"
            )
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port {self.port} out of range")

    @classmethod
    def from_tuple(cls, family: int, sockaddr: tuple[Any, ...]) -> SocketAddress:
        """Build an address from a ``socket`` module address tuple."""
        host = str(sockaddr[0]).split("%", 1)[0]
        return cls(family, socket.inet_pton(family, host), int(sockaddr[1]))

    @property
    def host(self) -> str:
        """The address in its textual form."""
        return socket.inet_ntop(self.family, self.address)

    def to_tuple(self) -> tuple[Any, ...]:
        """Return the address as a tuple accepted by ``socket`` methods."""
        if int(self.family) == int(socket.AF_INET6):
            return (self.host, self.port, 0, 0)
        return (self.host, self.port)


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def sockaddr_cmp(first: SocketAddress, second: SocketAddress) -> int:
    """Order two addresses by family, then port, then address; return -1, 0 or 1."""
    result = _sign(int(first.family), int(second.family))
    if result:
        return result
    if int(first.family) in _ADDRESS_SIZES:
        return _sign(first.port, second.port) or _sign(first.address, second.address)
    return _sign(first.address, second.address) or _sign(first.port, second.port)


def sockaddr_cmp_addr(first: SocketAddress, second: SocketAddress) -> int:
    """Order two addresses by family and address, ignoring the port."""
    result = _sign(int(first.family), int(second.family))
    if result:
        return result
    return _sign(first.address, second.address)


def validate_hostname(hostname: str | bytes | None) -> bool:
    """Tell whether ``hostname`` is a syntactically valid DNS name.

    Labels hold letters, digits, ``-`` and ``_``, are 1 to 63 characters long
    and neither start nor end with ``-``.  One trailing dot is allowed.
    """
    if hostname is None:
        return False
    if isinstance(hostname, bytes):
        try:
            hostname = hostname.decode("ascii")
        except UnicodeDecodeError:
            return False
    if not 1 <= len(hostname) <= _MAX_HOSTNAME:
        return False
    if hostname.startswith("."):
        return False
    labels = hostname.split(".")
    if len(labels) > 1 and labels[-1] == "":
        labels.pop()
    for label in labels:
        if not 1 <= len(label) <= _MAX_LABEL:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not _VALID_LABEL_CHARS.issuperset(label):
            return False
    return True


def _parse_ip(host: str | None) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    if host is None:
        return None
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def _port_number(port: str | int) -> int:
    """Read a port the lenient way: leading integer, truncated to 16 bits."""
    if isinstance(port, int):
        return port & 0xFFFF
    match = _LEADING_INT.match(str(port).lstrip())
    return (int(match.group()) if match else 0) & 0xFFFF


def get_sockaddr(
    host: str | None,
    port: str | int | None = None,
    block: bool = False,
    ipv6first: bool = False,
) -> SocketAddress:
    """Turn a host and port into a socket address.

    IP literals are converted directly.  Names are resolved; with ``block``
    set, failed lookups are retried up to seven times with growing pauses.
    The first address of the preferred family wins, otherwise the first
    address returned.  Raises ResolveError when nothing usable is found.
    """
    literal = _parse_ip(host)
    if literal is not None:
        family = socket.AF_INET if literal.version == 4 else socket.AF_INET6
        number = _port_number(port) if port is not None else 0
        return SocketAddress(family, literal.packed, number)

    service = None if port is None else str(port)
    results: list[Any] = []
    error: socket.gaierror | None = None
    for attempt in range(1, _RESOLVE_ATTEMPTS + 1):
        try:
            results = socket.getaddrinfo(host, service, socket.AF_UNSPEC, socket.SOCK_STREAM)
            error = None
        except socket.gaierror as exc:
            error = exc
        if not block or error is None:
            break
        delay = 2 ** attempt
        time.sleep(delay)
        log.error("failed to resolve server name, wait %d seconds", delay)

    if error is not None:
        log.error("getaddrinfo: %s", error)
        raise ResolveError(f"getaddrinfo: {error}") from error

    preferred = socket.AF_INET6 if ipv6first else socket.AF_INET
    for family, _type, _proto, _name, sockaddr in results:
        if family == preferred:
            return SocketAddress.from_tuple(family, sockaddr)
    if results:
        family, _type, _proto, _name, sockaddr = results[0]
        if family in (socket.AF_INET, socket.AF_INET6):
            return SocketAddress.from_tuple(family, sockaddr)
    log.error("failed to resolve remote addr")
    raise ResolveError(f"failed to resolve remote addr {host!r}")


def bind_to_address(sock: socket.socket, host: str) -> None:
    """Bind ``sock`` to the IP literal ``host`` on an ephemeral port.

    Raises ValueError when ``host`` is not an IP address and OSError when the
    bind itself fails.
    """
    ip = _parse_ip(host)
    if ip is None:
        raise ValueError(f"not an IP address: {host!r}")
    if ip.version == 4:
        sock.bind((str(ip), 0))
    else:
        sock.bind((str(ip), 0, 0, 0))


def set_reuseport(sock: socket.socket) -> None:
    """Enable port reuse on ``sock``; raises OSError where unsupported."""
    sock.setsockopt(socket.SOL_SOCKET, _SO_REUSEPORT, 1)


def set_interface(sock: socket.socket, interface_name: str) -> None:
    """Bind ``sock`` to a network interface; raises OSError where unsupported."""
    name = interface_name.encode()[:_IFNAMSIZ]
    sock.setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, name.ljust(_IFREQ_SIZE, b"\0"))