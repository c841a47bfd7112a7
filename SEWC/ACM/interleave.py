# =============================================================================
# interleave.py — Nibble packing and channel (de)interleaving
# =============================================================================
#
# Nibble order is high-then-low within each byte, everywhere in FWSE:
#   mono   : byte = (code[2k] << 4) | code[2k+1]
#   stereo : byte = (ch0_code[k] << 4) | ch1_code[k]
#
# Sample streams are interleaved frame by frame:
#   [ch0_s0, ch1_s0, ch0_s1, ch1_s1, ...]
# =============================================================================

from __future__ import annotations

from typing import Sequence

import numpy as np


def split_nibbles(payload: bytes) -> list[int]:
    """Expand each byte into its two 4-bit codes, high nibble first."""
    nibbles: list[int] = []
    for byte in payload:
        nibbles.append(byte >> 4)
        nibbles.append(byte & 0x0F)
    return nibbles


def pack_nibbles(nibbles: Sequence[int]) -> bytes:
    """
    Pack 4-bit codes two per byte, high nibble first.
    An odd trailing code gets a zero low nibble.
    """
    out = bytearray((len(nibbles) + 1) // 2)
    for i, n in enumerate(nibbles):
        if i % 2 == 0:
            out[i // 2] = (n & 0x0F) << 4
        else:
            out[i // 2] |= n & 0x0F
    return bytes(out)


def interleave(channels: Sequence[Sequence[int]]) -> np.ndarray:
    """
    Merge per-channel sample sequences into one frame-interleaved int32 array.

    All channels must hold the same number of samples.
    """
    if not channels:
        return np.zeros(0, dtype=np.int32)
    arrays = [np.asarray(ch, dtype=np.int32) for ch in channels]
    lengths = {len(a) for a in arrays}
    if len(lengths) != 1:
        raise ValueError(f"channel lengths differ: {sorted(lengths)}")
    return np.stack(arrays, axis=1).reshape(-1)


def deinterleave(samples: Sequence[int], channel_count: int) -> list[np.ndarray]:
    """
    Split a frame-interleaved stream into one int32 array per channel.

    A trailing partial frame (len(samples) not a multiple of channel_count)
    is dropped, matching sample_count = len(samples) // channel_count.
    """
    if channel_count < 1:
        raise ValueError(f"channel_count must be >= 1, got {channel_count}")
    arr = np.asarray(samples, dtype=np.int32)
    frames = len(arr) // channel_count
    grid = arr[: frames * channel_count].reshape(frames, channel_count)
    return [np.ascontiguousarray(grid[:, ch]) for ch in range(channel_count)]
