#!/usr/bin/env python3
# =============================================================================
# convert.py — SEW ⇄ WAV Converter (CLI)
# =============================================================================
#
# Usage:
#   python -m SEWC.convert decode <file.sew>
#   python -m SEWC.convert encode <file.wav> [version=3] [loop_start] [loop_end]
#   python -m SEWC.convert encode <file.wav> 3 1024 88200 -o out/bgm.sew
#
# Output lands next to the input with the extension swapped (.wav / .sew)
# unless -o is given.  Loop points that are negative or not numbers mean
# "no loop" (-1).  Only container version 3 can be written.
#
# Exit status:
#   0  converted
#   1  input rejected (ValidationError) or unreadable.  A rejected input
#      produced no output file, so callers and scripts must see a failure.
#   2  bad arguments (UsageError / argparse)
# =============================================================================

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from SEWC.errors import UsageError, ValidationError
from SEWC.SMM.constants import SEW_VERSION, NO_LOOP
from SEWC.SFM.sew_container import SewFile, write_sew
from SEWC.SFM.wav_container import read_wav, write_wav

DIVIDER = "=" * 68
MODES = ("decode", "encode")


def decode_sew_to_wav(sew_path, wav_path=None, verbose: bool = True) -> Path:
    """Decode a .sew file into a 32-bit slot WAV.  Returns the WAV path."""
    sew_path = Path(sew_path)
    wav_path = Path(wav_path) if wav_path else sew_path.with_suffix(".wav")

    sew = SewFile.open(sew_path)
    if verbose:
        print(f"\n{sew.describe()}")

    samples = sew.decode()
    write_wav(wav_path, samples, sew.channel_count, sew.sample_rate)
    return wav_path


def encode_wav_to_sew(
    wav_path,
    version: int = SEW_VERSION,
    loop_start: int = NO_LOOP,
    loop_end: int = NO_LOOP,
    sew_path=None,
) -> Path:
    """Encode a 32-bit slot WAV into a .sew file.  Returns the SEW path."""
    if version < 0:
        raise UsageError("Version can't be negative!")
    if version != SEW_VERSION:
        raise ValidationError(f"Only version {SEW_VERSION} is supported, got {version}.")

    wav_path = Path(wav_path)
    sew_path = Path(sew_path) if sew_path else wav_path.with_suffix(".sew")

    wav = read_wav(wav_path)
    write_sew(sew_path, wav.samples, wav.channel_count, wav.sample_rate,
              loop_start, loop_end)
    return sew_path


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def parse_version(text: str) -> int:
    try:
        version = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("Version isn't a valid number!")
    if version < 0:
        raise argparse.ArgumentTypeError("Version can't be negative!")
    return version


def parse_loop_point(text: str) -> int:
    """Negative or unparsable loop points collapse to -1 (no loop)."""
    try:
        value = int(text)
    except ValueError:
        return NO_LOOP
    return value if value >= 0 else NO_LOOP


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sewc",
        description="Convert FWSE v3 .sew files to 32-bit WAV and back",
    )
    parser.add_argument("mode", choices=MODES,
                        help="decode = .sew to .wav, encode = .wav to .sew")
    parser.add_argument("path", help="Input file")
    parser.add_argument(
        "version", nargs="?", type=parse_version, default=SEW_VERSION,
        help="Container version to write (encode only), default 3",
    )
    parser.add_argument(
        "loop_start", nargs="?", type=parse_loop_point, default=NO_LOOP,
        help="Loop start frame (encode only), default -1 = no loop",
    )
    parser.add_argument(
        "loop_end", nargs="?", type=parse_loop_point, default=NO_LOOP,
        help="Loop end frame (encode only), default -1 = no loop",
    )
    parser.add_argument("-o", "--output", default=None,
                        help="Output path, default = input with swapped extension")
    return parser


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> Path:
    if args.mode == "decode":
        return decode_sew_to_wav(args.path, args.output)
    if args.mode == "encode":
        return encode_wav_to_sew(args.path, args.version, args.loop_start,
                                 args.loop_end, args.output)
    raise UsageError(f"Unknown mode {args.mode!r}. Supported modes: {', '.join(MODES)}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not Path(args.path).is_file():
        print(f"  [!!] Couldn't open file {args.path}.")
        sys.exit(1)

    try:
        out_path = run(args)
    except UsageError as exc:
        print(f"  [!!] {exc}")
        parser.print_usage()
        sys.exit(2)
    except (ValidationError, OSError) as exc:
        print(f"  [!!] {exc}")
        sys.exit(1)

    print(f"\n{DIVIDER}")
    print(f"  [INFO] {args.mode}d {args.path} -> {out_path}")
    print(DIVIDER)
    sys.exit(0)


if __name__ == "__main__":
    main()
