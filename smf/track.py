"""Track chunk event streams.

A track chunk is ``b"MTrk"``, a 32-bit big-endian payload length, then
``(delta-time, event)`` pairs back to back until the payload ends.  The
last event must be EndOfTrack.

Round-trip guarantee: ``encode_track(decode_track(payload)) == payload``
whenever every VarLenInt in the payload is minimally encoded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from .errors import InvalidChunk, MissingEndOfTrack, TruncatedChunk
from .events import MTrkEvent, encode_event, read_event
from .meta import EndOfTrack
from .varlen import encode_varlen, read_varlen

logger = logging.getLogger(__name__)

TRACK_TAG = b"MTrk"
CHUNK_HEADER_SIZE = 8


@dataclass(frozen=True)
class TrackEvents:
    """Immutable, EndOfTrack-terminated sequence of MTrkEvents."""

    events: Tuple[MTrkEvent, ...]

    def __init__(self, events: Iterable[MTrkEvent]) -> None:
        object.__setattr__(self, "events", tuple(events))
        if not self.events:
            raise MissingEndOfTrack("track has no events")
        if not isinstance(self.events[-1].event, EndOfTrack):
            last = type(self.events[-1].event).__name__
            raise MissingEndOfTrack(f"track ends with {last}, not EndOfTrack")

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[MTrkEvent]:
        return iter(self.events)

    def __getitem__(self, index: int) -> MTrkEvent:
        return self.events[index]

    def absolute_times(self) -> List[int]:
        """Cumulative tick position of every event."""
        ticks = 0
        out: List[int] = []
        for item in self.events:
            ticks += item.delta_time
            out.append(ticks)
        return out


def decode_track(payload: bytes) -> TrackEvents:
    """Decode a track chunk payload (without the ``MTrk`` header)."""
    events: List[MTrkEvent] = []
    running_status: int | None = None
    pos = 0
    while pos < len(payload):
        delta_time, pos = read_varlen(payload, pos)
        event, running_status, elided, pos = read_event(payload, pos, running_status)
        events.append(MTrkEvent(delta_time, event, elided))

    if not events:
        raise MissingEndOfTrack("track payload is empty", 0)
    if not isinstance(events[-1].event, EndOfTrack):
        raise MissingEndOfTrack(
            f"track ends with {type(events[-1].event).__name__}, not EndOfTrack",
            len(payload),
        )
    logger.debug("decoded %d events from %d-byte track payload", len(events), len(payload))
    return TrackEvents(events)


def encode_track(events: TrackEvents) -> bytes:
    """Encode events back into a track chunk payload."""
    parts: List[bytes] = []
    running_status: int | None = None
    for item in events:
        parts.append(encode_varlen(item.delta_time))
        event_bytes, running_status = encode_event(item, running_status)
        parts.append(event_bytes)
    return b"".join(parts)


def decode_track_bytes(data: bytes, pos: int = 0) -> Tuple[TrackEvents, int]:
    """Decode one ``MTrk`` chunk starting at ``pos``.

    Returns ``(events, bytes_consumed)``.  Error offsets inside the
    payload are relative to the payload start.
    """
    if pos + CHUNK_HEADER_SIZE > len(data):
        raise TruncatedChunk(
            f"track chunk header needs {CHUNK_HEADER_SIZE} bytes, "
            f"{len(data) - pos} left",
            pos,
        )
    tag = bytes(data[pos : pos + 4])
    if tag != TRACK_TAG:
        raise InvalidChunk(f"expected chunk tag {TRACK_TAG!r}, found {tag!r}", pos)
    length = int.from_bytes(data[pos + 4 : pos + 8], "big")
    start = pos + CHUNK_HEADER_SIZE
    end = start + length
    if end > len(data):
        raise TruncatedChunk(
            f"track chunk declares {length} bytes, only {len(data) - start} left",
            start,
        )
    return decode_track(data[start:end]), CHUNK_HEADER_SIZE + length


def encode_track_events(events: TrackEvents) -> bytes:
    """Encode a full ``MTrk`` chunk; the length field is always recomputed."""
    payload = encode_track(events)
    return TRACK_TAG + len(payload).to_bytes(4, "big") + payload
