"""System-exclusive events.

Wire layout: ``[0xF0|0xF7] [VarLenInt length] [payload] [optional 0xF7]``.

Files in the wild close a SysEx block in one of three ways, and the
decoded event remembers which so it re-encodes to the same bytes:

  COUNTED   the 0xF7 is the last counted payload byte (the SMF norm)
  TRAILING  the 0xF7 follows the payload but is not included in the length
  NONE      no terminator (split packets, 0xF7 escape events)

``SysExEvent.data`` never includes the terminator.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidStatusByte, TruncatedSysEx
from .varlen import encode_varlen, read_varlen

SYSEX_START = 0xF0
SYSEX_ESCAPE = 0xF7
END_OF_EXCLUSIVE = 0xF7


class Terminator(enum.Enum):
    COUNTED = "counted"
    TRAILING = "trailing"
    NONE = "none"


@dataclass(frozen=True)
class SysExEvent:
    tag: int
    data: bytes
    terminator: Terminator = Terminator.COUNTED

    def __post_init__(self) -> None:
        if self.tag not in (SYSEX_START, SYSEX_ESCAPE):
            raise ValueError(f"SysEx tag must be 0xF0 or 0xF7, got 0x{self.tag:02X}")
        if not isinstance(self.terminator, Terminator):
            raise ValueError(f"unknown terminator shape {self.terminator!r}")
        if self.terminator is not Terminator.COUNTED and self.data[-1:] == b"\xF7":
            # Would decode back as COUNTED.
            raise ValueError("payload ending in 0xF7 needs a COUNTED terminator")

    @property
    def status(self) -> int:
        return self.tag

    def to_bytes(self) -> bytes:
        payload = self.data
        if self.terminator is Terminator.COUNTED:
            payload += bytes([END_OF_EXCLUSIVE])
        out = bytes([self.tag]) + encode_varlen(len(payload)) + payload
        if self.terminator is Terminator.TRAILING:
            out += bytes([END_OF_EXCLUSIVE])
        return out


def read_sysex(data: bytes, pos: int = 0) -> Tuple[SysExEvent, int]:
    if pos >= len(data):
        raise TruncatedSysEx("expected SysEx tag, input exhausted", pos)
    tag = data[pos]
    if tag not in (SYSEX_START, SYSEX_ESCAPE):
        raise InvalidStatusByte(f"0x{tag:02X} does not start a SysEx event", pos)
    length, body = read_varlen(data, pos + 1)
    end = body + length
    if end > len(data):
        raise TruncatedSysEx(
            f"SysEx declares {length} bytes, only {len(data) - body} left", body
        )
    payload = bytes(data[body:end])

    if payload[-1:] == b"\xF7":
        return SysExEvent(tag, payload[:-1], Terminator.COUNTED), end
    if end < len(data) and data[end] == END_OF_EXCLUSIVE:
        return SysExEvent(tag, payload, Terminator.TRAILING), end + 1
    return SysExEvent(tag, payload, Terminator.NONE), end
