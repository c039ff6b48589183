"""Meta events (``0xFF`` prefix), which only exist inside SMF track chunks.

Wire layout: ``FF <type> <length> <payload>``.  For the fixed-size types
the length is a constant the file must repeat; anything else is
rejected with :class:`InvalidMetaLength` rather than guessed at.

Type  Event               Length
0x00  SequenceNumber      2
0x01  Text                var   (cp1252 text, likewise 0x02-0x07)
0x02  CopyrightNotice     var
0x03  TrackName           var
0x04  InstrumentName      var
0x05  Lyric               var
0x06  Marker              var
0x07  CuePoint            var
0x20  MidiChannelPrefix   1
0x2F  EndOfTrack          0
0x51  SetTempo            3     (microseconds per quarter, 24-bit BE)
0x54  SmpteOffset         5
0x58  TimeSignature       4
0x59  KeySignature        2
0x7F  SequencerSpecific   var   (opaque)
 ..   UnknownMetaEvent    var   (opaque, type kept verbatim)

Text is decoded as cp1252, one byte per character.  The five bytes
cp1252 leaves undefined (0x81, 0x8D, 0x8F, 0x90, 0x9D) raise
:class:`InvalidTextEncoding` for that event instead of being replaced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Tuple, Type

from .errors import (
    InvalidMetaLength,
    InvalidStatusByte,
    InvalidTextEncoding,
    TruncatedMeta,
)
from .varlen import check_data_value, encode_varlen, read_varlen

META_PREFIX = 0xFF
TEXT_ENCODING = "cp1252"


@dataclass(frozen=True)
class MetaEvent:
    META_TYPE: ClassVar[int] = -1

    @property
    def meta_type(self) -> int:
        return self.META_TYPE

    @property
    def status(self) -> int:
        return META_PREFIX

    def payload(self) -> bytes:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        payload = self.payload()
        return bytes([META_PREFIX, self.meta_type]) + encode_varlen(len(payload)) + payload


# ── fixed-size meta events ───────────────────────────────────────────


@dataclass(frozen=True)
class FixedMetaEvent(MetaEvent):
    LENGTH: ClassVar[int] = 0

    @classmethod
    def from_payload(cls, payload: bytes) -> "FixedMetaEvent":
        raise NotImplementedError


@dataclass(frozen=True)
class SequenceNumber(FixedMetaEvent):
    number: int

    META_TYPE: ClassVar[int] = 0x00
    LENGTH: ClassVar[int] = 2

    def __post_init__(self) -> None:
        check_data_value("sequence number", self.number, 0xFFFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "SequenceNumber":
        return cls(int.from_bytes(payload, "big"))

    def payload(self) -> bytes:
        return self.number.to_bytes(2, "big")


@dataclass(frozen=True)
class MidiChannelPrefix(FixedMetaEvent):
    channel: int

    META_TYPE: ClassVar[int] = 0x20
    LENGTH: ClassVar[int] = 1

    def __post_init__(self) -> None:
        check_data_value("channel prefix", self.channel, 0xFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "MidiChannelPrefix":
        return cls(payload[0])

    def payload(self) -> bytes:
        return bytes([self.channel])


@dataclass(frozen=True)
class EndOfTrack(FixedMetaEvent):
    META_TYPE: ClassVar[int] = 0x2F
    LENGTH: ClassVar[int] = 0

    @classmethod
    def from_payload(cls, payload: bytes) -> "EndOfTrack":
        return cls()

    def payload(self) -> bytes:
        return b""


@dataclass(frozen=True)
class SetTempo(FixedMetaEvent):
    tempo: int  # microseconds per quarter note

    META_TYPE: ClassVar[int] = 0x51
    LENGTH: ClassVar[int] = 3

    def __post_init__(self) -> None:
        check_data_value("tempo", self.tempo, 0xFFFFFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "SetTempo":
        return cls(int.from_bytes(payload, "big"))

    def payload(self) -> bytes:
        return self.tempo.to_bytes(3, "big")

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.tempo if self.tempo else 0.0


@dataclass(frozen=True)
class SmpteOffset(FixedMetaEvent):
    hour: int
    minute: int
    second: int
    frame: int
    subframe: int

    META_TYPE: ClassVar[int] = 0x54
    LENGTH: ClassVar[int] = 5

    def __post_init__(self) -> None:
        # Raw bytes; bits 5-6 of the hour byte carry the frame rate.
        for name in ("hour", "minute", "second", "frame", "subframe"):
            check_data_value(name, getattr(self, name), 0xFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "SmpteOffset":
        return cls(*payload)

    def payload(self) -> bytes:
        return bytes([self.hour, self.minute, self.second, self.frame, self.subframe])


@dataclass(frozen=True)
class TimeSignature(FixedMetaEvent):
    numerator: int
    denominator: int  # power of two: 2 means a quarter note
    clocks_per_click: int
    thirty_seconds_per_quarter: int

    META_TYPE: ClassVar[int] = 0x58
    LENGTH: ClassVar[int] = 4

    def __post_init__(self) -> None:
        for name in (
            "numerator",
            "denominator",
            "clocks_per_click",
            "thirty_seconds_per_quarter",
        ):
            check_data_value(name, getattr(self, name), 0xFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "TimeSignature":
        return cls(*payload)

    def payload(self) -> bytes:
        return bytes(
            [
                self.numerator,
                self.denominator,
                self.clocks_per_click,
                self.thirty_seconds_per_quarter,
            ]
        )


@dataclass(frozen=True)
class KeySignature(FixedMetaEvent):
    key: int  # sharps (>0) or flats (<0)
    scale: int  # 0 major, 1 minor

    META_TYPE: ClassVar[int] = 0x59
    LENGTH: ClassVar[int] = 2

    def __post_init__(self) -> None:
        if not -128 <= self.key <= 127:
            raise ValueError(f"key must be -128..127, got {self.key}")
        check_data_value("scale", self.scale, 0xFF)

    @classmethod
    def from_payload(cls, payload: bytes) -> "KeySignature":
        return cls(int.from_bytes(payload[:1], "big", signed=True), payload[1])

    def payload(self) -> bytes:
        return self.key.to_bytes(1, "big", signed=True) + bytes([self.scale])


# ── variable-size meta events ────────────────────────────────────────


@dataclass(frozen=True)
class TextMetaEvent(MetaEvent):
    text: str

    def __post_init__(self) -> None:
        try:
            encoded = self.text.encode(TEXT_ENCODING)
        except UnicodeEncodeError as exc:
            raise ValueError(
                f"{type(self).__name__} text not representable in {TEXT_ENCODING}: "
                f"{self.text[exc.start:exc.end]!r}"
            ) from exc
        encode_varlen(len(encoded))

    def payload(self) -> bytes:
        return self.text.encode(TEXT_ENCODING)


@dataclass(frozen=True)
class Text(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x01


@dataclass(frozen=True)
class CopyrightNotice(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x02


@dataclass(frozen=True)
class TrackName(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x03


@dataclass(frozen=True)
class InstrumentName(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x04


@dataclass(frozen=True)
class Lyric(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x05


@dataclass(frozen=True)
class Marker(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x06


@dataclass(frozen=True)
class CuePoint(TextMetaEvent):
    META_TYPE: ClassVar[int] = 0x07


@dataclass(frozen=True)
class SequencerSpecific(MetaEvent):
    data: bytes

    META_TYPE: ClassVar[int] = 0x7F

    def __post_init__(self) -> None:
        encode_varlen(len(self.data))

    def payload(self) -> bytes:
        return self.data


FIXED_META_EVENTS: Dict[int, Type[FixedMetaEvent]] = {
    cls.META_TYPE: cls
    for cls in (
        SequenceNumber,
        MidiChannelPrefix,
        EndOfTrack,
        SetTempo,
        SmpteOffset,
        TimeSignature,
        KeySignature,
    )
}

TEXT_META_EVENTS: Dict[int, Type[TextMetaEvent]] = {
    cls.META_TYPE: cls
    for cls in (
        Text,
        CopyrightNotice,
        TrackName,
        InstrumentName,
        Lyric,
        Marker,
        CuePoint,
    )
}

KNOWN_META_TYPES = frozenset(
    set(FIXED_META_EVENTS) | set(TEXT_META_EVENTS) | {SequencerSpecific.META_TYPE}
)


@dataclass(frozen=True)
class UnknownMetaEvent(MetaEvent):
    """Meta event of a type this codec does not interpret; kept verbatim."""

    type_byte: int
    data: bytes

    def __post_init__(self) -> None:
        check_data_value("meta type", self.type_byte, 0xFF)
        if self.type_byte in KNOWN_META_TYPES:
            raise ValueError(
                f"meta type 0x{self.type_byte:02X} has a dedicated event class"
            )
        encode_varlen(len(self.data))

    @property
    def meta_type(self) -> int:
        return self.type_byte

    def payload(self) -> bytes:
        return self.data


def read_meta(data: bytes, pos: int = 0) -> Tuple[MetaEvent, int]:
    """Decode one meta event starting at its 0xFF prefix."""
    if pos >= len(data) or data[pos] != META_PREFIX:
        found = f"0x{data[pos]:02X}" if pos < len(data) else "end of input"
        raise InvalidStatusByte(f"expected meta prefix 0xFF, found {found}", pos)
    if pos + 1 >= len(data):
        raise TruncatedMeta("meta event missing its type byte", pos)
    meta_type = data[pos + 1]
    pos += 2

    fixed = FIXED_META_EVENTS.get(meta_type)
    if fixed is not None:
        if pos >= len(data):
            raise TruncatedMeta(f"meta type 0x{meta_type:02X} missing its length", pos)
        declared = data[pos]
        if declared != fixed.LENGTH:
            raise InvalidMetaLength(meta_type, fixed.LENGTH, declared, pos)
        pos += 1
        end = pos + fixed.LENGTH
        if end > len(data):
            raise TruncatedMeta(
                f"meta type 0x{meta_type:02X} needs {fixed.LENGTH} bytes, "
                f"{len(data) - pos} left",
                pos,
            )
        return fixed.from_payload(bytes(data[pos:end])), end

    length, pos = read_varlen(data, pos)
    end = pos + length
    if end > len(data):
        raise TruncatedMeta(
            f"meta type 0x{meta_type:02X} declares {length} bytes, "
            f"{len(data) - pos} left",
            pos,
        )
    payload = bytes(data[pos:end])

    text_cls = TEXT_META_EVENTS.get(meta_type)
    if text_cls is not None:
        try:
            text = payload.decode(TEXT_ENCODING)
        except UnicodeDecodeError as exc:
            raise InvalidTextEncoding(
                f"byte 0x{payload[exc.start]:02X} in {text_cls.__name__} "
                f"has no {TEXT_ENCODING} character",
                pos + exc.start,
            ) from exc
        return text_cls(text), end
    if meta_type == SequencerSpecific.META_TYPE:
        return SequencerSpecific(payload), end
    return UnknownMetaEvent(meta_type, payload), end
