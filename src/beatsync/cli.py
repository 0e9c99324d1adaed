"""
Command line entry point.

    beatsync analyze song.wav [--json] [--config settings.yaml]
    beatsync sync song.wav --at 12.5
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .config.settings import load_settings
from .core.engine import BeatSyncEngine
from .core.models import BeatSummary
from .core.progress import LoggingProgressReporter
from .core.synchronizer import active_index
from .utils.exceptions import BeatSyncError
from .utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="beatsync", description="Detect beats and resolve the active beat during playback.")
    p.add_argument("--config", default=None, help="YAML settings file")
    p.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = p.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="List the detected beats of an audio file")
    analyze.add_argument("input", help="Input audio file")
    analyze.add_argument("--json", action="store_true", help="Print beats as JSON")
    analyze.add_argument("--window-size", type=int, default=None, help="Samples per analysis window")
    analyze.add_argument("--hop-size", type=int, default=None, help="Samples between windows")
    analyze.add_argument("--min-spacing", type=float, default=None, help="Minimum seconds between beats")

    sync = sub.add_parser("sync", help="Print the beat active at a playback position")
    sync.add_argument("input", help="Input audio file")
    sync.add_argument("--at", type=float, required=True, help="Playback position in seconds")

    return p


def _analyze(engine: BeatSyncEngine, input_path: str):
    session = asyncio.run(engine.load_file(input_path))
    engine.close()
    return session.beats


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        if args.log_level:
            settings.logging.level = args.log_level
        setup_logging(settings.logging.level, settings.logging.format)

        if args.command == "analyze":
            if args.window_size is not None:
                settings.analysis.window_size = args.window_size
            if args.hop_size is not None:
                settings.analysis.hop_size = args.hop_size
            if args.min_spacing is not None:
                settings.analysis.min_spacing = args.min_spacing

        engine = BeatSyncEngine(settings, reporter=LoggingProgressReporter())
        beats = _analyze(engine, args.input)

    except BeatSyncError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.command == "sync":
        index = active_index(beats, args.at, settings.sync.lookahead)
        if index < 0:
            print(f"No beat active at {args.at:.3f}s")
        else:
            beat = beats[index]
            print(f"Beat #{index} at {beat.time:.3f}s ({beat.category.value})")
        return 0

    if args.json:
        json.dump([beat.to_dict() for beat in beats], sys.stdout, indent=2)
        print()
        return 0

    for index, beat in enumerate(beats):
        print(f"{index:5d}  {beat.time:9.3f}s  {beat.category.value:<8}  {beat.energy:.6f}")
    summary = BeatSummary.of(beats)
    print(f"{summary.total} beats ({summary.strong} strong, {summary.regular} regular)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
