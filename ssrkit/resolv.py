"""Asynchronous host name resolution with address family preference."""

from __future__ import annotations

import asyncio
import enum
import ipaddress
import logging
import socket
from typing import Iterable, Sequence

import dns.asyncresolver
import dns.exception
import dns.rdatatype

from .netutils import SocketAddress

__all__ = ["ResolveMode", "Resolver", "choose_address"]

log = logging.getLogger(__name__)

_QUERY_LIFETIME = 30.0
_LOCAL_PREFIXES = ("127.0.0.1", "::1")


class ResolveMode(enum.Enum):
    """Which address families are looked up and which one is preferred."""

    IPV4_ONLY = 0
    IPV6_ONLY = 1
    IPV4_FIRST = 2
    IPV6_FIRST = 3


def _first_of_family(responses: Sequence[SocketAddress], family: int) -> SocketAddress | None:
    for address in responses:
        if int(address.family) == int(family):
            return address
    return None


def choose_address(
    responses: Sequence[SocketAddress], mode: ResolveMode
) -> SocketAddress | None:
    """Pick the best address from ``responses`` for ``mode``, or None if empty.

    In the *_FIRST modes the first address of the preferred family wins;
    otherwise, and in the *_ONLY modes, the first address is taken.
    """
    preferred = None
    if mode is ResolveMode.IPV4_FIRST:
        preferred = _first_of_family(responses, socket.AF_INET)
    elif mode is ResolveMode.IPV6_FIRST:
        preferred = _first_of_family(responses, socket.AF_INET6)
    if preferred is not None:
        return preferred
    return responses[0] if responses else None


def _local_source(servers: list[str]) -> str | None:
    """Return the address to send from when the only nameserver is local."""
    if len(servers) != 1 or not servers[0].startswith(_LOCAL_PREFIXES):
        return None
    try:
        return str(ipaddress.ip_address(servers[0]))
    except ValueError:
        log.error("bind_to_address: %s is not an IP address", servers[0])
        return None


class Resolver:
    """Looks up A and AAAA records concurrently and picks one address.

    With ``nameservers`` left as None the system resolver configuration is
    used.  When the only nameserver given is a loopback address, queries are
    sent from that same address.
    """

    def __init__(
        self, nameservers: Iterable[str] | None = None, ipv6first: bool = False
    ) -> None:
        self.mode = ResolveMode.IPV6_FIRST if ipv6first else ResolveMode.IPV4_FIRST
        if nameservers is None:
            self._resolver = dns.asyncresolver.Resolver(configure=True)
            self._source: str | None = None
        else:
            servers = list(nameservers)
            self._resolver = dns.asyncresolver.Resolver(configure=False)
            self._resolver.nameservers = servers
            self._source = _local_source(servers)
            if self._source is not None:
                log.info("bind UDP resolver to %s", self._source)
        self._resolver.lifetime = _QUERY_LIFETIME
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _lookup(
        self, hostname: str, port: int, family: int, rdtype: dns.rdatatype.RdataType
    ) -> list[SocketAddress]:
        label = "IPv4" if family == socket.AF_INET else "IPv6"
        try:
            answer = await self._resolver.resolve(
                hostname, rdtype, source=self._source, raise_on_no_answer=False
            )
        except (dns.exception.DNSException, OSError) as exc:
            log.info("%s resolv: %s", label, exc)
            return []
        results = []
        for rdata in answer:
            try:
                packed = socket.inet_pton(family, str(rdata.address))
            except (OSError, ValueError):
                log.error("Failed to read DNS query result address")
                continue
            results.append(SocketAddress(family, packed, port))
        return results

    async def query(self, hostname: str, port: int = 0) -> SocketAddress | None:
        """Resolve ``hostname`` and return the chosen address with ``port``.

        Returns None when no address was found.  Cancelling the call cancels
        the outstanding lookups.
        """
        if self._closed:
            raise RuntimeError("resolver is closed")
        lookups = []
        if self.mode is not ResolveMode.IPV6_ONLY:
            lookups.append(self._lookup(hostname, port, socket.AF_INET, dns.rdatatype.A))
        if self.mode is not ResolveMode.IPV4_ONLY:
            lookups.append(self._lookup(hostname, port, socket.AF_INET6, dns.rdatatype.AAAA))
        batches = await asyncio.gather(*lookups)
        responses = [address for batch in batches for address in batch]
        return choose_address(responses, self.mode)

    def close(self) -> None:
        """Shut the resolver down; later queries raise RuntimeError."""
        self._closed = True

    async def __aenter__(self) -> Resolver:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()