"""Channel Voice and Channel Mode messages.

Wire layout: ``[status][data...]`` where the status high nibble selects
the message kind (0x8-0xE) and the low nibble is the channel.  Under
running status the status byte is left out and only the data follows.

Kind  Message                  Data bytes
 0x8  NoteOff                  note, velocity
 0x9  NoteOn                   note, velocity
 0xA  PolyphonicKeyPressure    note, pressure
 0xB  ControlChange            controller, value
 0xC  ProgramChange            program
 0xD  ChannelPressure          pressure
 0xE  PitchBendChange          lsb, msb  (14-bit value)

Controllers 0x7A-0x7F under kind 0xB are Channel Mode messages.  0x78
(All Sound Off) and 0x79 (Reset All Controllers) stay ordinary
ControlChange here; files round-trip through that boundary unchanged.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Dict, Tuple, Type, Union

from .errors import InvalidModeMessage, InvalidStatusByte, TruncatedChannelMessage
from .varlen import check_data_value, read_data_byte

MODE_CONTROLLER_FIRST = 0x7A
MODE_CONTROLLER_LAST = 0x7F


def is_channel_status(status: int | None) -> bool:
    return status is not None and 0x80 <= status <= 0xEF


@dataclass(frozen=True)
class ChannelMessage:
    channel: int

    KIND: ClassVar[int] = 0
    ARITY: ClassVar[int] = 2

    def __post_init__(self) -> None:
        check_data_value("channel", self.channel, 0x0F)

    @property
    def status(self) -> int:
        return (self.KIND << 4) | self.channel

    def data_bytes(self) -> bytes:
        raise NotImplementedError

    def to_bytes(self, include_status: bool = True) -> bytes:
        data = self.data_bytes()
        if include_status:
            return bytes([self.status]) + data
        return data


@dataclass(frozen=True)
class NoteOff(ChannelMessage):
    note: int
    velocity: int

    KIND: ClassVar[int] = 0x8

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("note", self.note)
        check_data_value("velocity", self.velocity)

    def data_bytes(self) -> bytes:
        return bytes([self.note, self.velocity])


@dataclass(frozen=True)
class NoteOn(ChannelMessage):
    note: int
    velocity: int

    KIND: ClassVar[int] = 0x9

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("note", self.note)
        check_data_value("velocity", self.velocity)

    def data_bytes(self) -> bytes:
        return bytes([self.note, self.velocity])


@dataclass(frozen=True)
class PolyphonicKeyPressure(ChannelMessage):
    note: int
    pressure: int

    KIND: ClassVar[int] = 0xA

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("note", self.note)
        check_data_value("pressure", self.pressure)

    def data_bytes(self) -> bytes:
        return bytes([self.note, self.pressure])


@dataclass(frozen=True)
class ControlChange(ChannelMessage):
    controller: int
    value: int

    KIND: ClassVar[int] = 0xB

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("controller", self.controller)
        check_data_value("value", self.value)
        if MODE_CONTROLLER_FIRST <= self.controller <= MODE_CONTROLLER_LAST:
            raise ValueError(
                f"controller 0x{self.controller:02X} is a channel mode message; "
                "use ChannelModeMessage"
            )

    def data_bytes(self) -> bytes:
        return bytes([self.controller, self.value])


@dataclass(frozen=True)
class ProgramChange(ChannelMessage):
    program: int

    KIND: ClassVar[int] = 0xC
    ARITY: ClassVar[int] = 1

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("program", self.program)

    def data_bytes(self) -> bytes:
        return bytes([self.program])


@dataclass(frozen=True)
class ChannelPressure(ChannelMessage):
    pressure: int

    KIND: ClassVar[int] = 0xD
    ARITY: ClassVar[int] = 1

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("pressure", self.pressure)

    def data_bytes(self) -> bytes:
        return bytes([self.pressure])


@dataclass(frozen=True)
class PitchBendChange(ChannelMessage):
    value: int  # 14-bit, 0x2000 is centre

    KIND: ClassVar[int] = 0xE

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("pitch bend value", self.value, 0x3FFF)

    def data_bytes(self) -> bytes:
        return bytes([self.value & 0x7F, (self.value >> 7) & 0x7F])


class Mode(enum.Enum):
    LOCAL_CONTROL_OFF = "local_control_off"
    LOCAL_CONTROL_ON = "local_control_on"
    ALL_NOTES_OFF = "all_notes_off"
    OMNI_MODE_OFF = "omni_mode_off"
    OMNI_MODE_ON = "omni_mode_on"
    MONO_MODE_ON = "mono_mode_on"
    POLY_MODE_ON = "poly_mode_on"


# Mode -> (controller, value); None means the value byte is carried through.
MODE_TABLE: Dict[Mode, Tuple[int, int | None]] = {
    Mode.LOCAL_CONTROL_OFF: (0x7A, 0x00),
    Mode.LOCAL_CONTROL_ON: (0x7A, 0x7F),
    Mode.ALL_NOTES_OFF: (0x7B, 0x00),
    Mode.OMNI_MODE_OFF: (0x7C, 0x00),
    Mode.OMNI_MODE_ON: (0x7D, 0x00),
    Mode.MONO_MODE_ON: (0x7E, None),
    Mode.POLY_MODE_ON: (0x7F, 0x00),
}


@dataclass(frozen=True)
class ChannelModeMessage(ChannelMessage):
    """Control Change in the 0x7A-0x7F range.

    ``value`` is only meaningful for MONO_MODE_ON, where it is the number
    of mono channels (0 = as many as voices).
    """

    mode: Mode
    value: int = 0

    KIND: ClassVar[int] = 0xB

    def __post_init__(self) -> None:
        super().__post_init__()
        check_data_value("mode value", self.value)
        if self.mode is not Mode.MONO_MODE_ON and self.value != 0:
            raise ValueError(f"{self.mode.name} carries no value, got {self.value}")

    def data_bytes(self) -> bytes:
        controller, value = MODE_TABLE[self.mode]
        return bytes([controller, self.value if value is None else value])


AnyChannelMessage = Union[
    NoteOff,
    NoteOn,
    PolyphonicKeyPressure,
    ControlChange,
    ProgramChange,
    ChannelPressure,
    PitchBendChange,
    ChannelModeMessage,
]

VOICE_MESSAGES: Dict[int, Type[ChannelMessage]] = {
    cls.KIND: cls
    for cls in (
        NoteOff,
        NoteOn,
        PolyphonicKeyPressure,
        ControlChange,
        ProgramChange,
        ChannelPressure,
        PitchBendChange,
    )
}


def mode_from_pair(controller: int, value: int, pos: int | None = None) -> ChannelModeMessage:
    """Map a controller/value pair onto a mode, ignoring the channel (set to 0)."""
    for mode, (mode_controller, mode_value) in MODE_TABLE.items():
        if mode_controller != controller:
            continue
        if mode_value is None:
            return ChannelModeMessage(channel=0, mode=mode, value=value)
        if mode_value == value:
            return ChannelModeMessage(channel=0, mode=mode)
    raise InvalidModeMessage(
        f"no channel mode message for controller 0x{controller:02X} value 0x{value:02X}",
        pos,
    )


def read_channel_message(
    data: bytes, pos: int, status: int
) -> Tuple[AnyChannelMessage, int]:
    """Decode the data bytes of a channel message whose status is known.

    ``pos`` points at the first data byte; the status byte (if present on
    the wire) has already been consumed.
    """
    if not is_channel_status(status):
        raise InvalidStatusByte(f"0x{status:02X} is not a channel status", pos)
    kind = status >> 4
    channel = status & 0x0F
    cls = VOICE_MESSAGES[kind]
    if pos + cls.ARITY > len(data):
        raise TruncatedChannelMessage(
            f"status 0x{status:02X} needs {cls.ARITY} data bytes, "
            f"{len(data) - pos} left",
            pos,
        )

    start = pos
    first, pos = read_data_byte(data, pos)
    if cls.ARITY == 1:
        return cls(channel, first), pos
    second, pos = read_data_byte(data, pos)

    if kind == 0xB and MODE_CONTROLLER_FIRST <= first <= MODE_CONTROLLER_LAST:
        mode = mode_from_pair(first, second, start)
        return ChannelModeMessage(channel, mode.mode, mode.value), pos
    if kind == 0xE:
        return PitchBendChange(channel, (second << 7) | first), pos
    return cls(channel, first, second), pos
