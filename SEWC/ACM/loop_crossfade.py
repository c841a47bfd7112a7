# =============================================================================
# loop_crossfade.py — Loop-state and Crossfade Block Generator
# =============================================================================
#
# Builds the two fixed-size blocks that sit between the SEW header and the
# ADPCM payload.  Both are ALWAYS written; without a loop they are all zero.
#
# Loop-state block (12 × int32):
#   slot i     = predicted_sample of channel i at loop_start + 32
#   slot i + 6 = step_index       of channel i at loop_start + 32
#   A player seeks to loop_start + 32 and resumes decoding from this state
#   instead of replaying the stream from the top.
#
# Crossfade block (6 × 32 × int32, only channel_count × 32 used):
#   for frame j in 0..31, channel i:
#     xf[j*C + i] = ((s(loop_start+j, i) >> 12) * j
#                  + (s(loop_end+j,   i) >> 12) * (32 - j)) / 32
#   j = 0 is pure loop_end material, j = 31 almost pure loop_start material.
#   Values are raw 20-bit magnitudes (not shifted back up).
#   Division truncates toward zero (C integer semantics, NOT Python //).
# =============================================================================

from __future__ import annotations

import struct
from typing import NamedTuple, Optional, Sequence

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    SAMPLE_SHIFT, CROSSFADE_FRAMES, LOOP_SLOTS,
    LOOP_BLOCK_INTS, CROSSFADE_INTS,
)
from .adpcm_codec import LoopState


class LoopBlocks(NamedTuple):
    loop_state: list[int]    # LOOP_BLOCK_INTS values
    crossfade:  list[int]    # CROSSFADE_INTS values

    def loop_state_bytes(self) -> bytes:
        return struct.pack(f"<{LOOP_BLOCK_INTS}i", *self.loop_state)

    def crossfade_bytes(self) -> bytes:
        return struct.pack(f"<{CROSSFADE_INTS}i", *self.crossfade)

    @classmethod
    def empty(cls) -> "LoopBlocks":
        return cls([0] * LOOP_BLOCK_INTS, [0] * CROSSFADE_INTS)


def _trunc_div(num: int, den: int) -> int:
    q = abs(num) // den
    return q if num >= 0 else -q


def build_loop_blocks(
    samples:       Sequence[int],
    channel_count: int,
    loop_start:    int,
    loop_end:      int,
    loop_states:   Sequence[Optional[LoopState]],
) -> LoopBlocks:
    """
    Derive the loop-state and crossfade blocks for one SEW file.

    Args:
        samples:       Interleaved 32-bit samples, exactly as fed to the
                       encoder (pre-encode, not the decoded approximation).
        channel_count: 1 or 2.
        loop_start:    Loop start frame, -1 for none.
        loop_end:      Loop end frame, -1 for none.
        loop_states:   Per-channel LoopState captured by encode_channel();
                       None entries leave their slots at zero.

    Returns:
        LoopBlocks — all zero unless both loop_start and loop_end are >= 0.

    Raises:
        ValidationError: a 32-frame loop window runs past the end of `samples`.
    """
    blocks = LoopBlocks.empty()
    if loop_start < 0 or loop_end < 0:
        return blocks

    if channel_count > LOOP_SLOTS:
        raise ValidationError(f"Loop block holds at most {LOOP_SLOTS} channels.")

    values = samples.tolist() if hasattr(samples, "tolist") else list(samples)
    frames = len(values) // channel_count
    last = max(loop_start, loop_end) + CROSSFADE_FRAMES
    if last > frames:
        raise ValidationError(
            f"Loop window [{loop_start}, {loop_end}] + {CROSSFADE_FRAMES} frames "
            f"exceeds the {frames} frames available."
        )

    for ch, state in enumerate(loop_states[:channel_count]):
        if state is None:
            continue
        blocks.loop_state[ch] = state.predicted_sample
        blocks.loop_state[ch + LOOP_SLOTS] = state.step_index

    def sample_at(frame: int, ch: int) -> int:
        return values[frame * channel_count + ch] >> SAMPLE_SHIFT

    for j in range(CROSSFADE_FRAMES):
        for ch in range(channel_count):
            mixed = (sample_at(loop_start + j, ch) * j
                     + sample_at(loop_end + j, ch) * (CROSSFADE_FRAMES - j))
            blocks.crossfade[j * channel_count + ch] = _trunc_div(mixed, CROSSFADE_FRAMES)

    return blocks
