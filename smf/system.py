"""System Common and System Real-Time messages.

These always carry an explicit status byte; running status never
applies to them.  Inside a track chunk 0xF0/0xF7 are claimed by SysEx
events and 0xFF by meta events, so EndOfExclusive and SystemReset are
only reachable when this codec is called directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Tuple, Type, Union

from .errors import InvalidStatusByte, TruncatedSystemMessage
from .varlen import check_data_value, read_data_byte


@dataclass(frozen=True)
class SystemMessage:
    STATUS: ClassVar[int] = 0
    ARITY: ClassVar[int] = 0

    @property
    def status(self) -> int:
        return self.STATUS

    def data_bytes(self) -> bytes:
        return b""

    def to_bytes(self) -> bytes:
        return bytes([self.STATUS]) + self.data_bytes()


@dataclass(frozen=True)
class SystemCommonMessage(SystemMessage):
    pass


@dataclass(frozen=True)
class SystemRealTimeMessage(SystemMessage):
    pass


@dataclass(frozen=True)
class SongPositionPointer(SystemCommonMessage):
    value: int  # MIDI beats (sixteenth notes) since song start, 14-bit

    STATUS: ClassVar[int] = 0xF2
    ARITY: ClassVar[int] = 2

    def __post_init__(self) -> None:
        check_data_value("song position", self.value, 0x3FFF)

    def data_bytes(self) -> bytes:
        return bytes([self.value & 0x7F, (self.value >> 7) & 0x7F])


@dataclass(frozen=True)
class SongSelect(SystemCommonMessage):
    song: int

    STATUS: ClassVar[int] = 0xF3
    ARITY: ClassVar[int] = 1

    def __post_init__(self) -> None:
        check_data_value("song", self.song)

    def data_bytes(self) -> bytes:
        return bytes([self.song])


@dataclass(frozen=True)
class TuneRequest(SystemCommonMessage):
    STATUS: ClassVar[int] = 0xF6


@dataclass(frozen=True)
class EndOfExclusive(SystemCommonMessage):
    STATUS: ClassVar[int] = 0xF7


@dataclass(frozen=True)
class TimingClock(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xF8


@dataclass(frozen=True)
class Start(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xFA


@dataclass(frozen=True)
class Continue(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xFB


@dataclass(frozen=True)
class Stop(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xFC


@dataclass(frozen=True)
class ActiveSensing(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xFE


@dataclass(frozen=True)
class SystemReset(SystemRealTimeMessage):
    STATUS: ClassVar[int] = 0xFF


AnySystemMessage = Union[
    SongPositionPointer,
    SongSelect,
    TuneRequest,
    EndOfExclusive,
    TimingClock,
    Start,
    Continue,
    Stop,
    ActiveSensing,
    SystemReset,
]

SYSTEM_MESSAGES: Dict[int, Type[SystemMessage]] = {
    cls.STATUS: cls
    for cls in (
        SongPositionPointer,
        SongSelect,
        TuneRequest,
        EndOfExclusive,
        TimingClock,
        Start,
        Continue,
        Stop,
        ActiveSensing,
        SystemReset,
    )
}


def read_system_message(
    data: bytes, pos: int, status: int
) -> Tuple[AnySystemMessage, int]:
    """Decode the data bytes following an already-consumed system status."""
    cls = SYSTEM_MESSAGES.get(status)
    if cls is None:
        raise InvalidStatusByte(f"undefined system status 0x{status:02X}", pos)
    if pos + cls.ARITY > len(data):
        raise TruncatedSystemMessage(
            f"status 0x{status:02X} needs {cls.ARITY} data bytes, "
            f"{len(data) - pos} left",
            pos,
        )
    if cls is SongPositionPointer:
        lsb, pos = read_data_byte(data, pos)
        msb, pos = read_data_byte(data, pos)
        return SongPositionPointer((msb << 7) | lsb), pos
    if cls is SongSelect:
        song, pos = read_data_byte(data, pos)
        return SongSelect(song), pos
    return cls(), pos
