"""Track event stream: decode, encode and track-level invariants."""

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.channel import NoteOn, ProgramChange  # noqa: E402
from smf.errors import (  # noqa: E402
    InvalidChunk,
    InvalidTextEncoding,
    MalformedLength,
    MissingEndOfTrack,
    MissingRunningStatus,
    TruncatedChunk,
)
from smf.events import MTrkEvent  # noqa: E402
from smf.meta import EndOfTrack, SetTempo, TimeSignature, TrackName  # noqa: E402
from smf.track import (  # noqa: E402
    TrackEvents,
    decode_track,
    decode_track_bytes,
    encode_track,
    encode_track_events,
)

CONDUCTOR = bytes.fromhex(
    "00 FF 58 04 04 02 18 08"  # time signature 4/4
    "00 FF 51 03 07 A1 20"  # tempo 500000
    "83 00 FF 2F 00"  # end of track at +384
)

# Program change, then note on / note on (velocity 0) under running status.
PIANO = bytes.fromhex(
    "00 C0 05"
    "81 40 90 4C 20"
    "81 40 4C 00"
    "00 FF 2F 00"
)


def test_conductor_track_decodes_to_three_events() -> None:
    events = decode_track(CONDUCTOR)
    assert list(events) == [
        MTrkEvent(0, TimeSignature(4, 2, 24, 8)),
        MTrkEvent(0, SetTempo(500000)),
        MTrkEvent(384, EndOfTrack()),
    ]
    assert encode_track(events) == CONDUCTOR


def test_running_status_track_round_trips() -> None:
    events = decode_track(PIANO)
    assert [item.event for item in events] == [
        ProgramChange(channel=0, program=5),
        NoteOn(channel=0, note=76, velocity=32),
        NoteOn(channel=0, note=76, velocity=0),
        EndOfTrack(),
    ]
    assert [item.running_status for item in events] == [False, False, True, False]
    assert [item.delta_time for item in events] == [0, 192, 192, 0]
    assert encode_track(events) == PIANO


def test_explicit_repeated_status_is_preserved() -> None:
    payload = bytes.fromhex("00 90 3C 40 00 90 3C 00 00 FF 2F 00")
    assert encode_track(decode_track(payload)) == payload


def test_running_status_does_not_cross_meta_events() -> None:
    payload = bytes.fromhex("00 90 3C 40 00 FF 01 00 00 3C 00 00 FF 2F 00")
    with pytest.raises(MissingRunningStatus):
        decode_track(payload)


def test_absolute_times() -> None:
    assert decode_track(PIANO).absolute_times() == [0, 192, 384, 384]


def test_payload_ending_mid_varlen() -> None:
    with pytest.raises(MalformedLength):
        decode_track(CONDUCTOR + b"\x83")


def test_track_without_end_of_track() -> None:
    with pytest.raises(MissingEndOfTrack, match="NoteOn"):
        decode_track(bytes.fromhex("00 90 3C 40"))


def test_empty_track_payload() -> None:
    with pytest.raises(MissingEndOfTrack):
        decode_track(b"")


def test_undecodable_text_fails_the_track_cleanly() -> None:
    payload = bytes.fromhex("00 FF 03 02 41 8D 00 FF 2F 00")
    with pytest.raises(InvalidTextEncoding) as excinfo:
        decode_track(payload)
    assert excinfo.value.offset == 5


def test_track_events_invariant_on_construction() -> None:
    with pytest.raises(MissingEndOfTrack):
        TrackEvents([])
    with pytest.raises(MissingEndOfTrack):
        TrackEvents([MTrkEvent(0, TrackName("x"))])
    events = TrackEvents([MTrkEvent(0, TrackName("x")), MTrkEvent(0, EndOfTrack())])
    assert len(events) == 2
    assert events[-1].event == EndOfTrack()


def test_built_track_uses_running_status_only_where_flagged() -> None:
    events = TrackEvents(
        [
            MTrkEvent(0, NoteOn(channel=1, note=60, velocity=90)),
            MTrkEvent(96, NoteOn(channel=1, note=60, velocity=0), running_status=True),
            MTrkEvent(0, NoteOn(channel=1, note=64, velocity=90)),
            MTrkEvent(0, EndOfTrack()),
        ]
    )
    assert encode_track(events) == bytes.fromhex(
        "00 91 3C 5A 60 3C 00 00 91 40 5A 00 FF 2F 00"
    )


def test_chunk_length_is_recomputed() -> None:
    chunk = encode_track_events(decode_track(CONDUCTOR))
    assert chunk[:4] == b"MTrk"
    assert int.from_bytes(chunk[4:8], "big") == len(CONDUCTOR)
    assert chunk[8:] == CONDUCTOR


def test_decode_track_bytes_reports_consumed() -> None:
    chunk = b"MTrk" + len(PIANO).to_bytes(4, "big") + PIANO
    events, consumed = decode_track_bytes(chunk + b"MTrk")
    assert consumed == len(chunk)
    assert encode_track_events(events) == chunk


def test_decode_track_bytes_bad_tag() -> None:
    with pytest.raises(InvalidChunk):
        decode_track_bytes(b"MThd\x00\x00\x00\x04" + CONDUCTOR)


def test_decode_track_bytes_short_chunk() -> None:
    with pytest.raises(TruncatedChunk, match="declares 99 bytes"):
        decode_track_bytes(b"MTrk\x00\x00\x00\x63" + CONDUCTOR)
