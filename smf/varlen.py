"""Variable-length quantities and 7-bit data bytes.

A VarLenInt packs 7 bits per byte, most-significant group first.  Every
byte but the last has bit 7 set.  SMF caps the encoding at 4 bytes, so
the largest value is 0x0FFFFFFF.
"""

from __future__ import annotations

from typing import Tuple

from .errors import InvalidDataByte, MalformedLength, TruncatedData

MAX_VARLEN = 0x0FFFFFFF
MAX_VARLEN_BYTES = 4


def read_varlen(data: bytes, pos: int = 0) -> Tuple[int, int]:
    """Decode a VarLenInt starting at ``pos``.

    Returns ``(value, next_pos)``.  Non-minimal encodings (leading 0x80
    bytes) are accepted and yield their value.
    """
    start = pos
    value = 0
    for _ in range(MAX_VARLEN_BYTES):
        if pos >= len(data):
            raise MalformedLength(
                f"variable-length quantity cut short after {pos - start} bytes", start
            )
        byte = data[pos]
        pos += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos
    raise MalformedLength(
        f"variable-length quantity exceeds {MAX_VARLEN_BYTES} bytes "
        f"({data[start:pos].hex(' ')})",
        start,
    )


def encode_varlen(value: int) -> bytes:
    if value < 0 or value > MAX_VARLEN:
        raise ValueError(f"variable-length value out of range: {value}")
    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def varlen_size(value: int) -> int:
    """Return how many bytes ``encode_varlen(value)`` produces."""
    size = 1
    while value > 0x7F:
        value >>= 7
        size += 1
    return size


def read_data_byte(data: bytes, pos: int) -> Tuple[int, int]:
    """Read one data byte, rejecting it if bit 7 is set."""
    if pos >= len(data):
        raise TruncatedData("expected a data byte, input exhausted", pos)
    byte = data[pos]
    if byte & 0x80:
        raise InvalidDataByte(f"data byte 0x{byte:02X} has its high bit set", pos)
    return byte, pos + 1


def check_data_value(name: str, value: int, limit: int = 0x7F) -> None:
    """Raise ValueError unless ``0 <= value <= limit``."""
    if not 0 <= value <= limit:
        raise ValueError(f"{name} must be 0-{limit}, got {value}")
