#!/usr/bin/env python3
"""
suncore - entry point

Turns a recording into a nightcore version: faster and higher, with bass
boost, synthetic reverb and a soft fade in/out.

Usage:
    python main.py INPUT [--format wav|mp3] [--volume 0-100] [--speed 0.5-2.0]
                   [--reverb-decay 0.01-10] [--bass-boost 0-12] [--output-dir DIR]

Example:
    python main.py song.mp3 --format mp3 --speed 1.25 --bass-boost 6
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="suncore",
        description="Transform a recording into nightcore.",
    )
    parser.add_argument("input", type=Path, help="Source audio file (wav, flac, ogg, mp3)")
    parser.add_argument("--format", choices=("wav", "mp3"), default="wav",
                        help="Output format (default: wav)")
    parser.add_argument("--volume", type=int, default=100,
                        help="Output volume in percent, 0-100 (default: 100)")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Playback speed, 0.5-2.0 (default: 1.0)")
    parser.add_argument("--reverb-decay", type=float, default=0.01,
                        help="Reverb decay, 0.01-10 (default: 0.01)")
    parser.add_argument("--bass-boost", type=float, default=0.0,
                        help="Bass boost in dB, 0-12 (default: 0)")
    parser.add_argument("--normalize", action="store_true",
                        help="Block-normalise MP3 output")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Target directory (default: next to the input)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the reverb tail, for repeatable output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the pipeline for one file and return the exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("suncore")

    # Import our package
    from suncore.core import (
        PipelineOrchestrator,
        RenderParameters,
        SuncoreError,
        load_audio,
        save_encoded,
    )
    from suncore.utils import describe_buffer, format_size

    try:
        source = load_audio(args.input)
        params = RenderParameters.from_controls(
            volume=args.volume,
            speed=args.speed,
            reverb_decay=args.reverb_decay,
            bass_boost=args.bass_boost,
        )
        rng = np.random.default_rng(args.seed) if args.seed is not None else None

        encoded = PipelineOrchestrator(normalize_mp3=args.normalize).process(
            source, params, args.format, source_name=args.input.name, rng=rng
        )
        output_path = save_encoded(encoded, args.output_dir or args.input.parent)
    except (SuncoreError, FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"Processing failed: {e}")
        return 1

    rendered_seconds = source.duration_seconds / params.playback_rate
    print(f"Source:  {describe_buffer(source.num_channels, source.sample_rate, source.duration_seconds)}")
    print(f"Output:  {output_path} ({encoded.mime_type}, {format_size(encoded.size_bytes)}, "
          f"~{rendered_seconds:.2f}s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
