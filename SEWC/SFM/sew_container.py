# =============================================================================
# sew_container.py — FWSE v3 (.sew) Reader / Builder
# =============================================================================
#
# File image, little-endian:
#
#   0x000  SewHeader            40 bytes   (SEWC/SMM/layout.py)
#   0x028  zero
#   0x040  loop-state block     12 × int32
#   0x070  zero
#   0x0C0  crossfade block      6 × 32 × int32
#   0x3C0  zero padding up to the next 0x100 boundary
#   0x400  ADPCM payload        data_offset .. footer_offset
#   ....   SewFooter            28 bytes at footer_offset
#
#   footer_offset = data_offset + len(payload)
#   sample_count  = frames per channel (total samples // channel_count)
#
# Main API:
#   build_sew(samples, channel_count, sample_rate, loop_start, loop_end) -> bytes
#   write_sew(path, ...)                                                 -> SewFile
#   SewFile.open(path) / SewFile.from_bytes(data)                        -> SewFile
#   SewFile.decode()                                                     -> np.ndarray
# =============================================================================

from __future__ import annotations

import struct
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    SEW_MAGIC, SEW_VERSION, SEW_ALIGNMENT, MAX_CHANNELS, NO_LOOP,
    FOOTER_TIME_MAGIC, FOOTER_VER_MAGIC,
    LOOP_SLOTS, LOOP_BLOCK_INTS, CROSSFADE_INTS, CROSSFADE_FRAMES,
)
from SEWC.SMM.layout import SewHeader, SewFooter
from SEWC.ACM.adpcm_codec import LoopState, encode_payload, decode_payload
from SEWC.ACM.loop_crossfade import LoopBlocks, build_loop_blocks

LOOP_BLOCK_OFFSET = 0x40
LOOP_BLOCK_END    = LOOP_BLOCK_OFFSET + LOOP_BLOCK_INTS * 4     # = 0x70
CROSSFADE_OFFSET  = 0xC0
BLOCKS_END        = CROSSFADE_OFFSET + CROSSFADE_INTS * 4      # = 0x3C0


def _align(position: int, alignment: int) -> int:
    return position + (-position % alignment)


# ── Validation ───────────────────────────────────────────────────────────────

def validate_header(header: SewHeader) -> None:
    if header.magic != SEW_MAGIC:
        raise ValidationError("This is no valid FWSE file.")
    if not 1 <= header.channel_count <= MAX_CHANNELS:
        raise ValidationError(
            f"Only sew's with 1 or {MAX_CHANNELS} channels are supported, "
            f"got {header.channel_count}."
        )
    if header.version != SEW_VERSION:
        raise ValidationError(f"Only version {SEW_VERSION} is supported, got {header.version}.")
    if header.sample_count < 0:
        raise ValidationError(f"Negative sample count {header.sample_count}.")


def validate_footer(footer: SewFooter) -> None:
    if footer.magic != FOOTER_TIME_MAGIC or footer.magic2 != FOOTER_VER_MAGIC:
        raise ValidationError("This is no valid FWSE file.")
    if footer.version != SEW_VERSION:
        raise ValidationError(f"Only version {SEW_VERSION} is supported, got {footer.version}.")


# ── Builder ──────────────────────────────────────────────────────────────────

def build_sew(
    samples:       Sequence[int],
    channel_count: int,
    sample_rate:   int,
    loop_start:    int = NO_LOOP,
    loop_end:      int = NO_LOOP,
    timestamp:     Optional[datetime] = None,
) -> bytes:
    """
    Encode an interleaved 32-bit sample stream into a complete .sew image.

    Args:
        samples:       Interleaved int32 samples (20-bit values << 12).
        channel_count: 1 or 2.
        sample_rate:   Stored verbatim in the header.
        loop_start:    Loop start frame; negative = no loop.
        loop_end:      Loop end frame; negative = no loop.
        timestamp:     Footer date/time, default now.

    Returns:
        bytes — the full file image.
    """
    if not 1 <= channel_count <= MAX_CHANNELS:
        raise ValidationError(
            f"Only 1 or {MAX_CHANNELS} channels are supported, got {channel_count}."
        )
    loop_start = loop_start if loop_start >= 0 else NO_LOOP
    loop_end = loop_end if loop_end >= 0 else NO_LOOP

    samples = np.asarray(samples, dtype=np.int32)
    frames = len(samples) // channel_count
    samples = samples[: frames * channel_count]

    encoded = encode_payload(samples, channel_count, loop_start)
    blocks = build_loop_blocks(samples, channel_count, loop_start, loop_end, encoded.loop_states)

    data_offset = _align(BLOCKS_END, SEW_ALIGNMENT)
    header = SewHeader(
        footer_offset=data_offset + len(encoded.payload),
        data_offset=data_offset,
        channel_count=channel_count,
        sample_count=frames,
        sample_rate=sample_rate,
        loop_start=loop_start,
        loop_end=loop_end,
    )
    footer = SewFooter.stamped(timestamp or datetime.now())

    image = bytearray(data_offset)
    image[: SewHeader.STRUCT.size] = header.pack()
    image[LOOP_BLOCK_OFFSET:LOOP_BLOCK_END] = blocks.loop_state_bytes()
    image[CROSSFADE_OFFSET:BLOCKS_END] = blocks.crossfade_bytes()
    image += encoded.payload
    image += footer.pack()
    return bytes(image)


def write_sew(
    path: Union[str, Path],
    samples: Sequence[int],
    channel_count: int,
    sample_rate: int,
    loop_start: int = NO_LOOP,
    loop_end: int = NO_LOOP,
    timestamp: Optional[datetime] = None,
) -> "SewFile":
    """Build a .sew image, write it to `path` and return it re-opened."""
    image = build_sew(samples, channel_count, sample_rate, loop_start, loop_end, timestamp)
    with open(path, "wb") as f:
        f.write(image)
    return SewFile.from_bytes(image)


# ── Reader ───────────────────────────────────────────────────────────────────

class SewFile:
    """
    A validated FWSE v3 file held in memory.

    Usage:
        sew = SewFile.open("bgm_001.sew")
        print(sew.describe())
        samples = sew.decode()      # interleaved int32
    """

    def __init__(self, header: SewHeader, footer: SewFooter, payload: bytes,
                 blocks: LoopBlocks) -> None:
        self.header  = header
        self.footer  = footer
        self.payload = payload
        self._blocks = blocks

    @classmethod
    def from_bytes(cls, data: bytes) -> "SewFile":
        header = SewHeader.unpack(data)
        validate_header(header)

        if not header.data_offset <= header.footer_offset <= len(data):
            raise ValidationError(
                f"Payload range 0x{header.data_offset:X}..0x{header.footer_offset:X} "
                f"does not fit a {len(data)}-byte file."
            )
        footer = SewFooter.unpack(data, header.footer_offset)
        validate_footer(footer)

        if header.data_offset >= BLOCKS_END:
            blocks = LoopBlocks(
                list(struct.unpack_from(f"<{LOOP_BLOCK_INTS}i", data, LOOP_BLOCK_OFFSET)),
                list(struct.unpack_from(f"<{CROSSFADE_INTS}i", data, CROSSFADE_OFFSET)),
            )
        else:
            blocks = LoopBlocks.empty()

        payload = bytes(data[header.data_offset : header.footer_offset])
        return cls(header, footer, payload, blocks)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "SewFile":
        with open(path, "rb") as f:
            data = f.read()
        return cls.from_bytes(data)

    # ── Header fields ────────────────────────────────────────────────────────

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def channel_count(self) -> int:
        return self.header.channel_count

    @property
    def sample_rate(self) -> int:
        return self.header.sample_rate

    @property
    def sample_count(self) -> int:
        return self.header.sample_count

    @property
    def loop_start(self) -> int:
        return self.header.loop_start

    @property
    def loop_end(self) -> int:
        return self.header.loop_end

    @property
    def timestamp(self) -> Optional[datetime]:
        f = self.footer
        try:
            return datetime(f.year, f.month, f.day, f.hour, f.minute, f.second)
        except ValueError:
            return None

    # ── Loop data ────────────────────────────────────────────────────────────

    @property
    def loop_states(self) -> list[LoopState]:
        """Per-channel codec state stored for loop restart."""
        block = self._blocks.loop_state
        return [LoopState(block[ch], block[ch + LOOP_SLOTS])
                for ch in range(self.channel_count)]

    @property
    def crossfade(self) -> list[int]:
        """Used part of the crossfade block, interleaved per frame."""
        return self._blocks.crossfade[: CROSSFADE_FRAMES * self.channel_count]

    # ── Decode ───────────────────────────────────────────────────────────────

    def decode(self) -> np.ndarray:
        return decode_payload(self.payload, self.channel_count, self.sample_count)

    def describe(self) -> str:
        h = self.header
        return (
            f"Meta:\n"
            f"  Version: {h.version}\n"
            f"\n"
            f"  Channels: {h.channel_count}\n"
            f"  SampleRate: {h.sample_rate}\n"
            f"  Samples: {h.sample_count}\n"
            f"\n"
            f"  LoopStart: {h.loop_start}\n"
            f"  LoopEnd: {h.loop_end}"
        )
