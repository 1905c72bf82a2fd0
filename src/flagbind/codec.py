#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Parsing and rendering of option tokens.

Every bound option turns its textual token into a field value here. The
primitive parsers check the declared width (see ``flagbind.types``): a token
is first parsed into the full 64-bit range and then rejected if the narrower
target cannot represent it. Overflow is an error, never a silent truncation.

The specialized scalars (IP addresses, networks and masks, durations and hex
byte strings) get their own parse and format functions so that defaults render
the same way they are typed.
"""

from __future__ import annotations

import ipaddress
import math
import re
import struct
from datetime import timedelta
from typing import Any

from flagbind.constants import (
    FALSE_TOKENS,
    INT64_MAX,
    INT64_MIN,
    MAX_FLOAT32,
    TRUE_TOKENS,
    UINT64_MAX,
)
from flagbind.exceptions import NumberOverflowError, ParseValueError, type_name
from flagbind.types import (
    FLOAT_TYPES,
    SIGNED_RANGES,
    UNSIGNED_RANGES,
    BytesHex,
    Float32,
    IPMask,
)

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")

# Nanoseconds per duration unit
_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART_RE = re.compile(r"([0-9]*\.?[0-9]*)(ns|us|µs|μs|ms|s|m|h)")


def is_primitive(tp: Any) -> bool:
    """Return True if ``tp`` is parsed by :func:`parse_primitive`."""
    try:
        return tp in (bool, str) or tp in SIGNED_RANGES or tp in UNSIGNED_RANGES or tp in FLOAT_TYPES
    except TypeError:
        # unhashable typing constructs
        return False


def parse_bool(token: str) -> bool:
    """Parse a boolean token (``true``/``false``, ``1``/``0``, ``yes``/``no``, ...)."""
    lowered = token.strip().lower()
    if lowered in TRUE_TOKENS:
        return True
    if lowered in FALSE_TOKENS:
        return False
    raise ParseValueError(f"invalid syntax for bool: {token!r}", token=token)


def parse_int(tp: Any, token: str) -> int:
    """Parse a base-10 signed integer and check it against the width of ``tp``."""
    if not _SIGNED_RE.fullmatch(token):
        raise ParseValueError(f"invalid syntax for {type_name(tp)}: {token!r}", token=token)

    value = int(token)
    low, high = SIGNED_RANGES.get(tp, (INT64_MIN, INT64_MAX))
    if not INT64_MIN <= value <= INT64_MAX or not low <= value <= high:
        raise NumberOverflowError("number overflow", token=token)
    return value


def parse_uint(tp: Any, token: str) -> int:
    """Parse a base-10 unsigned integer and check it against the width of ``tp``."""
    if not _UNSIGNED_RE.fullmatch(token):
        raise ParseValueError(f"invalid syntax for {type_name(tp)}: {token!r}", token=token)

    value = int(token)
    _, high = UNSIGNED_RANGES.get(tp, (0, UINT64_MAX))
    if value > UINT64_MAX or value > high:
        raise NumberOverflowError("unsigned number overflow", token=token)
    return value


def parse_float(tp: Any, token: str) -> float:
    """Parse a float as 64-bit and check that ``tp`` can represent it.

    Float32 values are rounded to single precision. Infinity and NaN are only
    accepted when spelled out.
    """
    if token != token.strip() or "_" in token or not token:
        raise ParseValueError(f"invalid syntax for {type_name(tp)}: {token!r}", token=token)

    try:
        value = float(token)
    except ValueError as e:
        if not token.lstrip("+-").lower().startswith("0x"):
            raise ParseValueError(f"invalid syntax for {type_name(tp)}: {token!r}", token=token, original_error=e) from e
        try:
            value = float.fromhex(token)
        except (ValueError, OverflowError) as hex_error:
            raise ParseValueError(
                f"invalid syntax for {type_name(tp)}: {token!r}", token=token, original_error=hex_error
            ) from hex_error

    if math.isinf(value) and not token.lstrip("+-").lower().startswith("inf"):
        raise NumberOverflowError("float number overflow", token=token)

    if tp is Float32:
        if math.isfinite(value) and abs(value) > MAX_FLOAT32:
            raise NumberOverflowError("float number overflow", token=token)
        value = struct.unpack("<f", struct.pack("<f", value))[0]
    return value


def parse_primitive(tp: Any, token: str) -> Any:
    """Parse ``token`` into a value of the primitive type ``tp``.

    Strings, and any type not listed in ``flagbind.types``, are returned
    unchanged.

    Raises
    ------
    ParseValueError
        If the token is malformed for ``tp``
    NumberOverflowError
        If the value does not fit the declared width

    """
    if tp is bool:
        return parse_bool(token)
    if tp in SIGNED_RANGES:
        return parse_int(tp, token)
    if tp in UNSIGNED_RANGES:
        return parse_uint(tp, token)
    if tp in FLOAT_TYPES:
        return parse_float(tp, token)
    return token


def parse_ip(tp: Any, token: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Parse an IP address of the family given by ``tp``."""
    try:
        return tp(token.strip())
    except ValueError as e:
        raise ParseValueError(f"invalid string being converted to IP address: {token}", token=token, original_error=e) from e


def parse_ip_network(tp: Any, token: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    """Parse CIDR notation; host bits are masked off (``192.168.1.1/24`` is ``192.168.1.0/24``)."""
    token = token.strip()
    if "/" not in token:
        raise ParseValueError(f"invalid CIDR address: {token}", token=token)
    try:
        return tp(token, strict=False)
    except ValueError as e:
        raise ParseValueError(f"invalid CIDR address: {token}", token=token, original_error=e) from e


def parse_ip_mask(token: str) -> IPMask:
    """Parse an IPv4 mask in dotted (``255.255.255.0``) or hex (``ffffff00``) form."""
    token = token.strip()
    try:
        return IPMask(ipaddress.IPv4Address(token).packed)
    except ValueError:
        pass

    if len(token) == 8:
        try:
            return IPMask(bytes.fromhex(token))
        except ValueError as e:
            raise ParseValueError(f"failed to parse IP mask: {token!r}", token=token, original_error=e) from e
    raise ParseValueError(f"failed to parse IP mask: {token!r}", token=token)


def parse_duration(token: str) -> timedelta:
    """Parse a duration such as ``1h2m3s``, ``300ms`` or ``-1.5h``.

    Nanoseconds below a microsecond are truncated.
    """
    text = token.strip()
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ParseValueError(f"invalid duration {token!r}", token=token)

    total = 0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART_RE.match(text, pos)
        if match is None or match.group(1) in ("", "."):
            raise ParseValueError(f"invalid duration {token!r}", token=token)
        number, unit = match.groups()
        whole, _, frac = number.partition(".")
        scale = _DURATION_UNITS[unit]
        total += int(whole or "0") * scale
        if frac:
            total += int(frac) * scale // 10 ** len(frac)
        pos = match.end()

    if total > INT64_MAX:
        raise NumberOverflowError(f"invalid duration {token!r}", token=token)
    return timedelta(microseconds=sign * (total // 1000))


def _trim_fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(value: timedelta) -> str:
    """Render a duration the way :func:`parse_duration` reads it (``1h2m3s``)."""
    micros = value // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros == 0:
        return "0s"
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_trim_fraction(micros, 1_000)}ms"

    hours, rest = divmod(micros, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_trim_fraction(rest, 1_000_000)}s"


def parse_bytes_hex(token: str) -> BytesHex:
    """Parse a hexadecimal byte string (``a1b2c3``)."""
    try:
        return BytesHex(bytes.fromhex(token.strip()))
    except ValueError as e:
        raise ParseValueError(f"invalid hex string: {token!r}", token=token, original_error=e) from e


def format_bytes_hex(value: bytes) -> str:
    """Render bytes as upper-case hex."""
    return bytes(value).hex().upper()
