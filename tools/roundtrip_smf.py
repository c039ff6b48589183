#!/usr/bin/env python3
"""Decode + re-encode Standard MIDI Files and report byte mismatches."""

from __future__ import annotations

import argparse
import glob
import logging
from pathlib import Path
import random
import sys
from typing import Iterable, List, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.container import MidiFile  # noqa: E402

MIDI_SUFFIXES = {".mid", ".midi", ".smf"}


def collect_paths(patterns: Iterable[str]) -> List[Path]:
    paths: List[Path] = []
    for pattern in patterns:
        candidate = Path(pattern)
        if candidate.is_dir():
            paths.extend(
                sorted(p for p in candidate.rglob("*") if p.suffix.lower() in MIDI_SUFFIXES)
            )
            continue
        matches = sorted(Path(p) for p in glob.glob(pattern, recursive=True))
        if matches:
            paths.extend(matches)
        elif candidate.exists():
            paths.append(candidate)
    seen: set[Path] = set()
    unique_paths: List[Path] = []
    for path in paths:
        resolved = path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique_paths.append(path)
    return unique_paths


def first_diff(a: bytes, b: bytes) -> Tuple[int | None, int | None, int | None]:
    limit = min(len(a), len(b))
    for idx in range(limit):
        if a[idx] != b[idx]:
            return idx, a[idx], b[idx]
    if len(a) != len(b):
        return limit, None, None
    return None, None, None


def check_file(path: Path) -> str:
    """Return a one-line OK/FAIL/ERR report for ``path``."""
    data = path.read_bytes()
    try:
        midi = MidiFile.from_bytes(data)
    except ValueError as exc:
        return f"ERR  {path}: {exc}"

    rebuilt = midi.to_bytes()
    offset, left, right = first_diff(data, rebuilt)
    if offset is None:
        return f"OK   {path}"
    if left is None and right is None:
        return f"FAIL {path}: size mismatch (orig={len(data)} new={len(rebuilt)})"
    return f"FAIL {path}: diff at 0x{offset:04X} (orig=0x{left:02X} new=0x{right:02X})"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Decode + re-encode .mid files and report mismatches."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Files, directories or glob patterns (quotes recommended for wildcards).",
    )
    parser.add_argument(
        "--sample",
        type=int,
        default=None,
        help="Check a random sample of this many files instead of all of them.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for --sample.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    targets = collect_paths(args.paths)
    if not targets:
        parser.error("No files matched the provided paths/patterns.")
    if args.sample is not None and args.sample < len(targets):
        targets = random.Random(args.seed).sample(targets, args.sample)

    failures = 0
    for path in targets:
        line = check_file(path)
        if not line.startswith("OK"):
            failures += 1
        print(line)

    print(f"{len(targets) - failures}/{len(targets)} files round-tripped")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
