"""CLI for breathing analysis of a WAV file or a short microphone take."""

import argparse
import logging
import sys
from pathlib import Path

from breath_screen.audio import AnalysisConfig, AudioCollector, load_wav
from breath_screen.pipeline import analyze_breathing


def _print_report(report, as_json: bool, include_spectrum: bool) -> None:
    if as_json:
        print(report.to_json(include_spectrum=include_spectrum))
    else:
        print(report.summary())


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Screen a breathing recording (mono)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=16_000,
        help="Sample rate in Hz (default: 16000)",
    )
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument(
        "--spectrum",
        action="store_true",
        help="Include per-frame magnitude spectra in JSON output",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices and exit",
    )
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze a WAV file")
    analyze.add_argument("path", type=Path, help="Mono or multi-channel WAV file")

    record = sub.add_parser("record", help="Record from the microphone, then analyze")
    record.add_argument(
        "--duration",
        type=float,
        default=8.0,
        help="Recording duration in seconds (default: 8)",
    )
    record.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with --list-devices)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_devices:
        try:
            import sounddevice as sd
            print(sd.query_devices())
        except ImportError:
            print("sounddevice not installed: pip install sounddevice", file=sys.stderr)
            return 1
        return 0

    config = AnalysisConfig(sample_rate=args.sample_rate)

    if args.command == "analyze":
        try:
            audio = load_wav(str(args.path), sample_rate=config.sample_rate)
        except (OSError, ValueError) as exc:
            print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
            return 1
    elif args.command == "record":
        collector = AudioCollector(config)
        print(f"Recording {args.duration}s (mono {config.sample_rate} Hz)...", file=sys.stderr)
        try:
            audio = collector.record(args.duration, device=args.device)
        except ImportError as exc:
            print(str(exc), file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 2

    report = analyze_breathing(audio, config=config)
    _print_report(report, args.json, args.spectrum)
    return 0


if __name__ == "__main__":
    sys.exit(main())
