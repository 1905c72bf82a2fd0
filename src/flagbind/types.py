#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Field types with special command-line meaning.

Python integers and floats are unbounded, so the bounded widths are spelled
with ``typing.NewType`` markers. They cost nothing at runtime and let the
binder check overflow against the declared width:

    @dataclass
    class Limits:
        retries: Uint8 = Uint8(3)
        ratio: Float32 = Float32(0.5)

``Count``, ``BytesHex`` and ``IPMask`` are bound through dedicated options
regardless of their underlying representation.
"""

from __future__ import annotations

import ipaddress
from typing import NewType

from flagbind.constants import INT64_MAX, INT64_MIN, UINT64_MAX

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
Int = NewType("Int", int)

Uint8 = NewType("Uint8", int)
Uint16 = NewType("Uint16", int)
Uint32 = NewType("Uint32", int)
Uint64 = NewType("Uint64", int)
Uint = NewType("Uint", int)

Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)

# Counts occurrences of a flag, typically a verbosity level raised with -vvv
Count = NewType("Count", int)

# (min, max) of each signed width; a bare ``int`` is the native 64-bit width
SIGNED_RANGES = {
    int: (INT64_MIN, INT64_MAX),
    Int: (INT64_MIN, INT64_MAX),
    Int8: (-(1 << 7), (1 << 7) - 1),
    Int16: (-(1 << 15), (1 << 15) - 1),
    Int32: (-(1 << 31), (1 << 31) - 1),
    Int64: (INT64_MIN, INT64_MAX),
}

UNSIGNED_RANGES = {
    Uint: (0, UINT64_MAX),
    Uint8: (0, (1 << 8) - 1),
    Uint16: (0, (1 << 16) - 1),
    Uint32: (0, (1 << 32) - 1),
    Uint64: (0, UINT64_MAX),
}

FLOAT_TYPES = (float, Float32, Float64)


class BytesHex(bytes):
    """A byte string written as hexadecimal on the command line."""

    def __str__(self) -> str:
        return self.hex().upper()


class IPMask(bytes):
    """A network mask such as ``255.255.255.0``, stored as its raw bytes."""

    @classmethod
    def from_prefix(cls, prefix: int, bits: int = 32) -> IPMask:
        """Build the mask with ``prefix`` leading one bits."""
        value = ((1 << bits) - 1) ^ ((1 << (bits - prefix)) - 1)
        return cls(value.to_bytes(bits // 8, "big"))

    @property
    def prefixlen(self) -> int | None:
        """Return the number of leading ones, or None for a non-canonical mask."""
        bits = len(self) * 8
        value = int.from_bytes(self, "big")
        ones = bin(value).count("1")
        if value != ((1 << bits) - 1) ^ ((1 << (bits - ones)) - 1):
            return None
        return ones

    def __str__(self) -> str:
        if len(self) == 4:
            return str(ipaddress.IPv4Address(bytes(self)))
        if not self:
            return "<nil>"
        return self.hex()


IP_ADDRESS_TYPES = (ipaddress.IPv4Address, ipaddress.IPv6Address)
IP_NETWORK_TYPES = (ipaddress.IPv4Network, ipaddress.IPv6Network)


def is_newtype(tp: object) -> bool:
    """Return True if ``tp`` was created by ``typing.NewType``."""
    return hasattr(tp, "__supertype__")
