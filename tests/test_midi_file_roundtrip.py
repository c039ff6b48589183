"""Whole-file round trips, cross-checked against mido."""

import io
import logging
from pathlib import Path
import sys

import mido
import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.channel import ChannelModeMessage, ControlChange, Mode, NoteOn, ProgramChange  # noqa: E402
from smf.container import HeaderChunk, MidiFile  # noqa: E402
from smf.errors import InvalidChunk, TruncatedChunk  # noqa: E402
from smf.events import MTrkEvent  # noqa: E402
from smf.meta import EndOfTrack, SetTempo, TimeSignature, TrackName  # noqa: E402
from smf.sysex import SysExEvent, Terminator  # noqa: E402
from smf.track import TrackEvents  # noqa: E402

FOUR_TRACKS = bytes.fromhex(
    "4D546864 00000006 0001 0004 0060"
    "4D54726B 00000014"
    "00 FF 58 04 04 02 18 08  00 FF 51 03 07 A1 20  83 00 FF 2F 00"
    "4D54726B 00000010"
    "00 C0 05  81 40 90 4C 20  81 40 4C 00  00 FF 2F 00"
    "4D54726B 0000000F"
    "00 C1 2E  60 91 43 40  82 20 43 00  00 FF 2F 00"
    "4D54726B 00000015"
    "00 C2 46  00 92 30 60  00 3C 60  83 00 30 00  00 3C 00  00 FF 2F 00"
)


def _mido_bytes(mid: mido.MidiFile) -> bytes:
    buf = io.BytesIO()
    mid.save(file=buf)
    return buf.getvalue()


def test_four_track_file_round_trip() -> None:
    midi = MidiFile.from_bytes(FOUR_TRACKS)
    assert midi.header == HeaderChunk(format=1, ntrks=4, division=96)
    assert midi.header.ticks_per_quarter == 96
    assert [len(track) for track in midi.tracks] == [3, 4, 4, 6]
    assert midi.tracks[2][1] == MTrkEvent(96, NoteOn(channel=1, note=67, velocity=64))
    assert midi.tracks[3][2] == MTrkEvent(
        0, NoteOn(channel=2, note=60, velocity=96), running_status=True
    )
    assert midi.to_bytes() == FOUR_TRACKS


def test_four_track_file_agrees_with_mido() -> None:
    ours = MidiFile.from_bytes(FOUR_TRACKS)
    theirs = mido.MidiFile(file=io.BytesIO(FOUR_TRACKS))
    assert len(theirs.tracks) == len(ours.tracks)
    for our_track, their_track in zip(ours.tracks, theirs.tracks):
        assert [item.delta_time for item in our_track] == [m.time for m in their_track]
    notes = [m for m in theirs.tracks[3] if m.type == "note_on"]
    assert [(m.channel, m.note, m.velocity) for m in notes] == [
        (item.event.channel, item.event.note, item.event.velocity)
        for item in ours.tracks[3]
        if isinstance(item.event, NoteOn)
    ]


def test_mido_written_file_round_trips() -> None:
    mid = mido.MidiFile(type=1, ticks_per_beat=480)
    conductor = mido.MidiTrack()
    conductor.append(mido.MetaMessage("track_name", name="Tempo", time=0))
    conductor.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(100), time=0))
    conductor.append(mido.MetaMessage("time_signature", numerator=3, denominator=4, time=0))
    mid.tracks.append(conductor)

    lead = mido.MidiTrack()
    lead.append(mido.Message("program_change", channel=3, program=40, time=0))
    lead.append(mido.Message("sysex", data=[0x7E, 0x7F, 0x09, 0x01], time=0))
    for i, pitch in enumerate([60, 62, 64]):
        lead.append(mido.Message("note_on", channel=3, note=pitch, velocity=90, time=0 if i == 0 else 240))
        lead.append(mido.Message("note_on", channel=3, note=pitch, velocity=0, time=240))
    lead.append(mido.Message("control_change", channel=3, control=123, value=0, time=0))
    mid.tracks.append(lead)

    data = _mido_bytes(mid)
    ours = MidiFile.from_bytes(data)
    assert ours.to_bytes() == data

    conductor_events = [item.event for item in ours.tracks[0]]
    assert conductor_events == [
        TrackName("Tempo"),
        SetTempo(600000),
        TimeSignature(3, 2, 24, 8),
        EndOfTrack(),
    ]
    lead_events = [item.event for item in ours.tracks[1]]
    assert lead_events[0] == ProgramChange(channel=3, program=40)
    assert lead_events[1] == SysExEvent(0xF0, b"\x7E\x7F\x09\x01", Terminator.COUNTED)
    assert lead_events[-2] == ChannelModeMessage(channel=3, mode=Mode.ALL_NOTES_OFF)
    assert sum(isinstance(e, NoteOn) for e in lead_events) == 6


def test_our_file_reads_back_in_mido() -> None:
    track = TrackEvents(
        [
            MTrkEvent(0, TrackName("Keys")),
            MTrkEvent(0, ControlChange(channel=0, controller=7, value=100)),
            MTrkEvent(0, NoteOn(channel=0, note=60, velocity=80)),
            MTrkEvent(120, NoteOn(channel=0, note=60, velocity=0), running_status=True),
            MTrkEvent(0, EndOfTrack()),
        ]
    )
    midi = MidiFile(header=HeaderChunk(format=0, ntrks=1, division=120), tracks=[track])
    theirs = mido.MidiFile(file=io.BytesIO(midi.to_bytes()))
    assert theirs.ticks_per_beat == 120
    assert [(m.type, m.time) for m in theirs.tracks[0]] == [
        ("track_name", 0),
        ("control_change", 0),
        ("note_on", 0),
        ("note_on", 120),
        ("end_of_track", 0),
    ]


def test_header_ntrks_follows_track_list() -> None:
    midi = MidiFile.from_bytes(FOUR_TRACKS)
    trimmed = MidiFile(header=midi.header, tracks=midi.tracks[:2])
    assert MidiFile.from_bytes(trimmed.to_bytes()).header.ntrks == 2


def test_smpte_division() -> None:
    header = HeaderChunk(format=0, ntrks=1, division=0xE728)
    assert header.is_smpte
    assert header.smpte_frames == 25
    assert header.ticks_per_frame == 40
    assert header.ticks_per_quarter is None


def test_trailing_bytes_are_kept_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    data = FOUR_TRACKS + b"\x00\x00"
    with caplog.at_level(logging.WARNING, logger="smf.container"):
        midi = MidiFile.from_bytes(data)
    assert midi.trailing == b"\x00\x00"
    assert midi.to_bytes() == data
    assert "2 extra bytes" in caplog.text


def test_strict_trailing_rejects_extra_bytes() -> None:
    with pytest.raises(InvalidChunk, match="after the last track"):
        MidiFile.from_bytes(FOUR_TRACKS + b"\x00", strict_trailing=True)


def test_missing_track_chunk() -> None:
    header_only = FOUR_TRACKS[:14]
    with pytest.raises(TruncatedChunk):
        MidiFile.from_bytes(header_only)


@pytest.mark.parametrize(
    "data,error",
    [
        (b"RIFF" + FOUR_TRACKS[4:], InvalidChunk),
        (FOUR_TRACKS[:8] + b"\x00\x03" + FOUR_TRACKS[10:], InvalidChunk),
        (FOUR_TRACKS[:10], TruncatedChunk),
    ],
    ids=["bad-tag", "bad-format", "short"],
)
def test_bad_header(data: bytes, error: type) -> None:
    with pytest.raises(error):
        MidiFile.from_bytes(data)
