"""
inspect_sew.py — Print the header, footer and loop data of a .sew file

Usage:
    python tools/inspect_sew.py input.sew
    python tools/inspect_sew.py input.sew --crossfade
"""
import os
import sys
import argparse

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import numpy as np

from SEWC.errors import ValidationError
from SEWC.SFM.sew_container import SewFile


def inspect(path, show_crossfade=False):
    try:
        sew = SewFile.open(path)
    except ValidationError as e:
        print(f"  [!!] {path}: {e}")
        return False

    print("=" * 60)
    print(f"File : {path}")
    print("=" * 60)
    print(sew.describe())
    print()
    print(f"  Payload: {len(sew.payload)} bytes @ 0x{sew.header.data_offset:X}")
    print(f"  Footer : 0x{sew.header.footer_offset:X}  written {sew.timestamp}")

    if sew.loop_start >= 0 and sew.loop_end >= 0:
        print()
        for ch, state in enumerate(sew.loop_states):
            print(f"  Ch{ch} loop state: pred={state.predicted_sample}  idx={state.step_index}")
        if show_crossfade:
            xf = np.array(sew.crossfade).reshape(-1, sew.channel_count)
            for j, row in enumerate(xf):
                print(f"    xf[{j:2d}] " + "  ".join(f"{v:8d}" for v in row))

    samples = sew.decode()
    if len(samples):
        peak20 = int(np.max(np.abs(samples.astype(np.int64) >> 12)))
        print()
        print(f"  Decoded: {len(samples)} samples, peak20={peak20}")
    print("=" * 60)
    return True


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Inspect a FWSE v3 .sew file')
    parser.add_argument('sew', help='Path to .sew file')
    parser.add_argument('--crossfade', action='store_true', help='Dump the crossfade block')
    args = parser.parse_args()
    sys.exit(0 if inspect(args.sew, args.crossfade) else 1)
