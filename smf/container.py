from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List

from .errors import InvalidChunk, TruncatedChunk
from .track import TrackEvents, decode_track_bytes, encode_track_events

logger = logging.getLogger(__name__)

HEADER_TAG = b"MThd"
HEADER_LENGTH = 6
SUPPORTED_FORMATS = (0, 1, 2)


@dataclass(frozen=True)
class HeaderChunk:
    format: int
    ntrks: int
    division: int  # raw 16-bit word; bit 15 selects SMPTE timing
    extra: bytes = b""  # header bytes past the standard 6, kept verbatim

    @classmethod
    def from_bytes(cls, data: bytes) -> "HeaderChunk":
        if len(data) < 8 + HEADER_LENGTH:
            raise TruncatedChunk(
                f"file too short for header ({len(data)} bytes, need {8 + HEADER_LENGTH})",
                0,
            )
        if data[:4] != HEADER_TAG:
            raise InvalidChunk(f"bad header tag: {data[:4].hex()}", 0)
        length = int.from_bytes(data[4:8], "big")
        if length < HEADER_LENGTH:
            raise InvalidChunk(f"header length {length} is shorter than {HEADER_LENGTH}", 4)
        if 8 + length > len(data):
            raise TruncatedChunk(f"header declares {length} bytes", 8)
        fmt = int.from_bytes(data[8:10], "big")
        if fmt not in SUPPORTED_FORMATS:
            raise InvalidChunk(f"unsupported SMF format {fmt}", 8)
        return cls(
            format=fmt,
            ntrks=int.from_bytes(data[10:12], "big"),
            division=int.from_bytes(data[12:14], "big"),
            extra=bytes(data[14 : 8 + length]),
        )

    @property
    def size(self) -> int:
        return 8 + HEADER_LENGTH + len(self.extra)

    @property
    def is_smpte(self) -> bool:
        return bool(self.division & 0x8000)

    @property
    def ticks_per_quarter(self) -> int | None:
        return None if self.is_smpte else self.division

    @property
    def smpte_frames(self) -> int | None:
        """Frames per second (24, 25, 29 or 30) for SMPTE timing."""
        if not self.is_smpte:
            return None
        return -int.from_bytes(bytes([self.division >> 8]), "big", signed=True)

    @property
    def ticks_per_frame(self) -> int | None:
        return self.division & 0xFF if self.is_smpte else None

    def to_bytes(self) -> bytes:
        body = (
            self.format.to_bytes(2, "big")
            + self.ntrks.to_bytes(2, "big")
            + self.division.to_bytes(2, "big")
            + self.extra
        )
        return HEADER_TAG + len(body).to_bytes(4, "big") + body


@dataclass(frozen=True)
class MidiFile:
    """Header chunk plus ``ntrks`` decoded track chunks.

    Round-trip guarantee: ``MidiFile.from_bytes(data).to_bytes() == data``
    for files whose VarLenInts are minimally encoded.  Bytes after the
    last declared track are kept in ``trailing``.
    """

    header: HeaderChunk
    tracks: List[TrackEvents]
    trailing: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes, *, strict_trailing: bool = False) -> "MidiFile":
        header = HeaderChunk.from_bytes(data)
        pos = header.size
        tracks: List[TrackEvents] = []
        for index in range(header.ntrks):
            try:
                events, consumed = decode_track_bytes(data, pos)
            except ValueError:
                logger.error("track %d (chunk at 0x%04X) failed to decode", index, pos)
                raise
            logger.debug("track %d: %d events, %d bytes", index, len(events), consumed)
            tracks.append(events)
            pos += consumed

        trailing = bytes(data[pos:])
        if trailing:
            if strict_trailing:
                raise InvalidChunk(f"{len(trailing)} bytes after the last track", pos)
            logger.warning("%d extra bytes after the last track", len(trailing))
        return cls(header=header, tracks=tracks, trailing=trailing)

    def to_bytes(self) -> bytes:
        header = replace(self.header, ntrks=len(self.tracks))
        parts = [header.to_bytes()]
        for track in self.tracks:
            parts.append(encode_track_events(track))
        parts.append(self.trailing)
        return b"".join(parts)
