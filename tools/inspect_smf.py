#!/usr/bin/env python3
"""Human-readable Standard MIDI File inspector.

Prints the header fields, then one line per event for every track with
its absolute tick, delta-time, and decoded value.  Events whose status
byte was elided under running status are marked with ``rs``.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.container import MidiFile  # noqa: E402
from smf.events import MTrkEvent  # noqa: E402
from smf.meta import SetTempo  # noqa: E402

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


def format_midi_note(note: int) -> str:
    return f"{NOTE_NAMES[note % 12]}{note // 12 - 1}"


def describe_event(item: MTrkEvent) -> str:
    event = item.event
    text = repr(event)
    note = getattr(event, "note", None)
    if note is not None:
        text += f"  [{format_midi_note(note)}]"
    if isinstance(event, SetTempo):
        text += f"  [{event.bpm:.2f} bpm]"
    return text


def generate_report(path: Path, midi: MidiFile) -> str:
    header = midi.header
    lines: List[str] = [f"File: {path}"]
    lines.append(f"Format: {header.format}  Tracks: {header.ntrks}")
    if header.is_smpte:
        lines.append(
            f"Division: {header.smpte_frames} fps, {header.ticks_per_frame} ticks/frame"
        )
    else:
        lines.append(f"Division: {header.ticks_per_quarter} ticks/quarter")

    for index, track in enumerate(midi.tracks):
        lines.append("")
        lines.append(f"Track {index}: {len(track)} events")
        for tick, item in zip(track.absolute_times(), track):
            marker = "rs" if item.running_status else "  "
            lines.append(
                f"  {tick:>8}  +{item.delta_time:<6} {marker} {describe_event(item)}"
            )

    if midi.trailing:
        lines.append("")
        lines.append(f"Trailing bytes: {len(midi.trailing)} ({midi.trailing[:16].hex(' ')})")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect a single Standard MIDI File."
    )
    parser.add_argument("path", type=Path, help="Path to the .mid file to inspect.")
    args = parser.parse_args(argv)

    midi = MidiFile.from_bytes(args.path.read_bytes())
    print(generate_report(args.path, midi))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
