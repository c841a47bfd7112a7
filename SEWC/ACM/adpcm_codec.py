# =============================================================================
# adpcm_codec.py — FWSE v3 ADPCM Encoder / Decoder
# =============================================================================
#
# 4-bit predictive codec.  Every code n in 0..15 moves the predictor by an
# odd multiple of the current step:
#
#   pred  += (2n - 15) * STEP_TABLE[idx]        n=0 → -15 steps, n=15 → +15
#   idx    = clamp(idx + INDEX_TABLE[n], 0, 88)
#   out    = pred << 12                         (20-bit → 32-bit slot)
#
# The predictor itself is NOT clamped.  It may leave the 20-bit range and
# wraps exactly like a 32-bit register; downstream code must tolerate that.
#
# CLOSED LOOP:
#   The encoder runs every code it emits back through decode_nibble() on its
#   own state.  Encoder and decoder therefore walk through identical
#   (pred, idx) sequences, bit for bit.
#
# STEREO LAYOUT:
#   ch0 lives in the high nibble, ch1 in the low nibble of each payload byte.
#   Each channel is decoded as one complete pass with a fresh CodecState,
#   then the two results are merged sample by sample.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

import numpy as np

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    INDEX_TABLE, STEP_TABLE,
    STEP_INDEX_MIN, STEP_INDEX_MAX,
    NIBBLE_MIN, NIBBLE_MAX, NIBBLE_BIAS,
    SAMPLE_SHIFT, LOOP_STATE_OFFSET, MAX_CHANNELS, NO_LOOP,
)
from .interleave import split_nibbles, pack_nibbles, interleave, deinterleave


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def wrap_int32(value: int) -> int:
    """Reduce an unbounded Python int to the signed 32-bit range."""
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


class LoopState(NamedTuple):
    predicted_sample: int
    step_index:       int


@dataclass
class CodecState:
    """Predictor and step index threaded through one channel pass."""

    predicted_sample: int = 0
    step_index:       int = 0

    def reset(self) -> None:
        self.predicted_sample = 0
        self.step_index = 0

    def snapshot(self) -> LoopState:
        return LoopState(self.predicted_sample, self.step_index)


class EncodedChannel(NamedTuple):
    payload:    bytes                 # packed 4-bit codes, high nibble first
    loop_state: Optional[LoopState]   # state at loop_start + 32, if reached


class EncodedPayload(NamedTuple):
    payload:     bytes                      # container-ready ADPCM data
    loop_states: list[Optional[LoopState]]  # one entry per channel


# ── Nibble codec ─────────────────────────────────────────────────────────────

def decode_nibble(nibble: int, state: CodecState) -> int:
    """
    Apply one 4-bit code to `state` and return the resulting sample.

    Args:
        nibble: Code in 0..15.
        state:  Channel state, mutated in place.

    Returns:
        The new predictor shifted into a 32-bit sample slot.
    """
    step = STEP_TABLE[state.step_index]
    state.predicted_sample = wrap_int32(
        state.predicted_sample + (2 * nibble - 15) * step
    )
    state.step_index = _clamp(
        state.step_index + INDEX_TABLE[nibble], STEP_INDEX_MIN, STEP_INDEX_MAX
    )
    return wrap_int32(state.predicted_sample << SAMPLE_SHIFT)


def encode_nibble(sample: int, state: CodecState) -> int:
    """
    Quantise one 32-bit sample against `state` and return its 4-bit code.

    The code is fed straight back through decode_nibble() so `state` ends up
    exactly where a decoder will be after reading the same code.
    """
    step = STEP_TABLE[state.step_index]
    delta = (sample >> SAMPLE_SHIFT) - state.predicted_sample
    nibble = _clamp(
        math.floor(delta / 2.0 / step) + NIBBLE_BIAS, NIBBLE_MIN, NIBBLE_MAX
    )
    decode_nibble(nibble, state)
    return nibble


# ── Channel passes ───────────────────────────────────────────────────────────

def decode_channel(nibbles: Sequence[int]) -> list[int]:
    """Decode one channel's code sequence with a fresh CodecState."""
    state = CodecState()
    return [decode_nibble(n, state) for n in nibbles]


def encode_channel(samples: Sequence[int], loop_start: int = NO_LOOP) -> EncodedChannel:
    """
    Encode one channel's samples with a fresh CodecState.

    Args:
        samples:    32-bit sample slots for a single channel.
        loop_start: Loop start frame, or -1 for no loop.  When set, the state
                    reached just before encoding frame loop_start + 32 is
                    returned as the channel's LoopState.

    Returns:
        EncodedChannel(payload, loop_state).  loop_state is None when there is
        no loop or the channel ends before loop_start + 32.
    """
    state = CodecState()
    capture_at = loop_start + LOOP_STATE_OFFSET if loop_start >= 0 else None
    loop_state = None
    nibbles: list[int] = []

    for i, sample in enumerate(_as_ints(samples)):
        if i == capture_at:
            loop_state = state.snapshot()
        nibbles.append(encode_nibble(sample, state))

    return EncodedChannel(pack_nibbles(nibbles), loop_state)


# ── Whole-payload codec ──────────────────────────────────────────────────────

def decode_payload(
    payload: bytes,
    channel_count: int,
    sample_count: Optional[int] = None,
) -> np.ndarray:
    """
    Decode an FWSE ADPCM payload into an interleaved int32 sample stream.

    Parameters
    ----------
    payload       : raw bytes between data_offset and footer_offset
    channel_count : 1 (mono) or 2 (stereo, nibble-interleaved)
    sample_count  : frames per channel from the header; trims the trailing
                    pad code of odd-length streams.  None keeps everything.

    Returns
    -------
    np.ndarray[int32] of length frames * channel_count
    """
    _check_channel_count(channel_count)

    if channel_count == 1:
        decoded = decode_channel(split_nibbles(payload))
        if sample_count is not None:
            decoded = decoded[:sample_count]
        return np.asarray(decoded, dtype=np.int32)

    # Two full passes, then merge
    channels = [
        decode_channel([byte >> 4 for byte in payload]),
        decode_channel([byte & 0x0F for byte in payload]),
    ]
    frames = len(payload) if sample_count is None else min(sample_count, len(payload))
    return interleave([ch[:frames] for ch in channels])


def encode_payload(
    samples: Sequence[int],
    channel_count: int,
    loop_start: int = NO_LOOP,
) -> EncodedPayload:
    """
    Encode an interleaved sample stream into an FWSE ADPCM payload.

    Each channel is encoded independently with its own CodecState.  For
    stereo, the packed per-channel codes are re-split and merged as
    (ch0 << 4) | ch1, one byte per code position.
    """
    _check_channel_count(channel_count)

    if channel_count == 1:
        encoded = encode_channel(_as_ints(samples), loop_start)
        return EncodedPayload(encoded.payload, [encoded.loop_state])

    per_channel = [
        encode_channel(ch.tolist(), loop_start)
        for ch in deinterleave(samples, channel_count)
    ]
    high, low = (split_nibbles(enc.payload) for enc in per_channel)
    payload = bytes((h << 4) | l for h, l in zip(high, low))
    return EncodedPayload(payload, [enc.loop_state for enc in per_channel])


def _check_channel_count(channel_count: int) -> None:
    if not 1 <= channel_count <= MAX_CHANNELS:
        raise ValidationError(
            f"Only 1 or {MAX_CHANNELS} channels are supported, got {channel_count}."
        )


def _as_ints(samples: Sequence[int]) -> list[int]:
    # numpy scalars would overflow in the predictor arithmetic
    if isinstance(samples, np.ndarray):
        return samples.tolist()
    return [int(s) for s in samples]
