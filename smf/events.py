"""Event dispatch and the running-status state machine.

Running status is passed in and handed back explicitly rather than kept
on a shared object, so each track decode owns its own state.  The token
is ``None`` before the first event of a track; afterwards it is the
status byte of the last event (0xFF after a meta event, the tag byte
after a SysEx event).  Only channel statuses (0x80-0xEF) can be reused
by a following event that omits its status byte.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .channel import (
    AnyChannelMessage,
    ChannelMessage,
    is_channel_status,
    read_channel_message,
)
from .errors import MissingRunningStatus, TruncatedData
from .meta import META_PREFIX, MetaEvent, read_meta
from .sysex import SYSEX_ESCAPE, SYSEX_START, SysExEvent, read_sysex
from .system import AnySystemMessage, SystemMessage, read_system_message
from .varlen import check_data_value

Event = Union[AnyChannelMessage, AnySystemMessage, SysExEvent, MetaEvent]


@dataclass(frozen=True)
class MTrkEvent:
    """One timed event inside a track chunk.

    ``running_status`` records that the status byte was left out on the
    wire.  It only has an effect on channel messages, and only when the
    previous event left the same status behind; otherwise the status is
    written out in full.
    """

    delta_time: int
    event: Event
    running_status: bool = False

    def __post_init__(self) -> None:
        check_data_value("delta_time", self.delta_time, 0x0FFFFFFF)
        if not isinstance(self.event, (ChannelMessage, SystemMessage, SysExEvent, MetaEvent)):
            raise ValueError(f"not an SMF event: {self.event!r}")
        if self.running_status and not isinstance(self.event, ChannelMessage):
            raise ValueError(
                f"running status only applies to channel messages, not "
                f"{type(self.event).__name__}"
            )


def event_status(event: Event) -> int:
    """Running-status token an event leaves behind."""
    return event.status


def read_event(
    data: bytes, pos: int, running_status: int | None
) -> Tuple[Event, int, bool, int]:
    """Decode one event (without its delta-time).

    Returns ``(event, new_running_status, status_elided, next_pos)``.
    """
    if pos >= len(data):
        raise TruncatedData("expected an event after the delta-time", pos)
    lead = data[pos]

    if lead in (SYSEX_START, SYSEX_ESCAPE):
        event, pos = read_sysex(data, pos)
        return event, lead, False, pos

    if lead == META_PREFIX:
        event, pos = read_meta(data, pos)
        return event, META_PREFIX, False, pos

    if lead & 0x80:
        pos += 1
        if is_channel_status(lead):
            event, pos = read_channel_message(data, pos, lead)
        else:
            event, pos = read_system_message(data, pos, lead)
        return event, lead, False, pos

    if running_status is None:
        raise MissingRunningStatus(
            f"data byte 0x{lead:02X} with no running status", pos
        )
    if not is_channel_status(running_status):
        raise MissingRunningStatus(
            f"data byte 0x{lead:02X} after status 0x{running_status:02X}, "
            "which cannot be carried forward",
            pos,
        )
    event, pos = read_channel_message(data, pos, running_status)
    return event, running_status, True, pos


def encode_event(
    mtrk_event: MTrkEvent, running_status: int | None
) -> Tuple[bytes, int]:
    """Render one event (without its delta-time).

    Returns ``(event_bytes, new_running_status)``.
    """
    event = mtrk_event.event
    if isinstance(event, ChannelMessage):
        elide = mtrk_event.running_status and running_status == event.status
        return event.to_bytes(include_status=not elide), event.status
    return event.to_bytes(), event_status(event)
