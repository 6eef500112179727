"""Shared obfuscation state and helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Iterator

_MASK64 = (1 << 64) - 1
_HOST_CAPACITY = 64


@dataclass
class ServerInfo:
    """Connection parameters handed to protocol and obfuscation plugins."""

    host: str = ""
    port: int = 0
    param: str | None = None
    g_data: Any = None
    iv: bytes = b""
    recv_iv: bytes = b""
    key: bytes = b""
    head_len: int = 0
    tcp_mss: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.host.encode()) >= _HOST_CAPACITY:
            raise ValueError(f"host name longer than {_HOST_CAPACITY - 1} bytes")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port {self.port} out of range")

    @property
    def iv_len(self) -> int:
        return len(self.iv)

    @property
    def recv_iv_len(self) -> int:
        return len(self.recv_iv)

    @property
    def key_len(self) -> int:
        return len(self.key)


def get_head_size(data: bytes | None, default_size: int) -> int:
    """Return the size of the address header at the start of ``data``.

    The second byte is read as a signed char for domain-name headers.
    """
    if data is None or len(data) < 2:
        return default_size
    head_type = data[0] & 0x7
    if head_type == 1:
        return 7
    if head_type == 4:
        return 19
    if head_type == 3:
        name_len = data[1] - 256 if data[1] >= 0x80 else data[1]
        return 4 + name_len
    return default_size


class XorShift128Plus:
    """The xorshift128+ pseudo-random generator seeded from a 32-bit value."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = int(time.time())
        seed &= 0xFFFFFFFF
        self._s0 = seed | 0x100000000
        self._s1 = ((seed << 32) | 0x1) & _MASK64

    def next(self) -> int:
        """Advance the generator and return the next 64-bit value."""
        x = self._s0
        y = self._s1
        self._s0 = y
        x ^= (x << 23) & _MASK64
        x ^= x >> 17
        x ^= y ^ (y >> 26)
        self._s1 = x
        return (x + y) & _MASK64

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return self.next()