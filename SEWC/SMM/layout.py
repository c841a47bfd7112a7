# =============================================================================
# layout.py — SMM Header / Footer Byte Layouts
# =============================================================================
#
# Explicit little-endian struct layouts for every fixed-size record in the
# SEW and WAV containers.  Each record is a dataclass with pack() and
# unpack(); field order in the format string IS the file layout.
#
#   SewHeader  (40 bytes @ 0x00)
#     0x00  magic          4s   "FWSE"
#     0x04  version        i    3
#     0x08  footer_offset  i
#     0x0C  data_offset    i    0x400
#     0x10  channel_count  i    1 or 2
#     0x14  sample_count   i    frames per channel
#     0x18  sample_rate    i
#     0x1C  unk1           i    0x10
#     0x20  loop_start     i    -1 = no loop
#     0x24  loop_end       i    -1 = no loop
#
#   SewFooter  (28 bytes @ footer_offset)
#     magic "tIME", time_length 8, year (i16), month, day, hour, minute,
#     second, pad (u8 each), magic2 "ver.", ver_length 4, version 3
#
#   WavHeader  (44 bytes @ 0x00) — canonical RIFF/WAVE/fmt /data header
# =============================================================================

from __future__ import annotations

import struct
from dataclasses import dataclass, astuple

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    SEW_MAGIC, SEW_VERSION, SEW_DATA_OFFSET, SEW_UNK1, NO_LOOP,
    FOOTER_TIME_MAGIC, FOOTER_TIME_LEN, FOOTER_VER_MAGIC, FOOTER_VER_LEN,
    WAV_RIFF_MAGIC, WAV_WAVE_MAGIC, WAV_FMT_MAGIC, WAV_DATA_MAGIC,
    WAV_FMT_CHUNK_SIZE, WAV_FORMAT_PCM, WAV_BLOCK_ALIGN, WAV_BITS_PER_SAMPLE,
)


def _unpack(fmt: struct.Struct, data: bytes, offset: int, name: str) -> tuple:
    if offset < 0 or offset + fmt.size > len(data):
        raise ValidationError(
            f"{name} truncated: need {fmt.size} bytes at 0x{offset:X}, "
            f"file is {len(data)} bytes"
        )
    return fmt.unpack_from(data, offset)


# ── SEW header ────────────────────────────────────────────────────────────────

@dataclass
class SewHeader:
    magic:         bytes = SEW_MAGIC
    version:       int = SEW_VERSION
    footer_offset: int = 0
    data_offset:   int = SEW_DATA_OFFSET
    channel_count: int = 1
    sample_count:  int = 0
    sample_rate:   int = 0
    unk1:          int = SEW_UNK1
    loop_start:    int = NO_LOOP
    loop_end:      int = NO_LOOP

    STRUCT = struct.Struct("<4s9i")

    def pack(self) -> bytes:
        return self.STRUCT.pack(*astuple(self))

    @classmethod
    def unpack(cls, data: bytes, offset: int = 0) -> "SewHeader":
        return cls(*_unpack(cls.STRUCT, data, offset, "SEW header"))


# ── SEW footer ────────────────────────────────────────────────────────────────

@dataclass
class SewFooter:
    magic:       bytes = FOOTER_TIME_MAGIC
    time_length: int = FOOTER_TIME_LEN
    year:        int = 0
    month:       int = 0
    day:         int = 0
    hour:        int = 0
    minute:      int = 0
    second:      int = 0
    pad:         int = 0
    magic2:      bytes = FOOTER_VER_MAGIC
    ver_length:  int = FOOTER_VER_LEN
    version:     int = SEW_VERSION

    STRUCT = struct.Struct("<4sih6B4sii")

    @classmethod
    def stamped(cls, when) -> "SewFooter":
        """Build a footer carrying the date/time of `when` (a datetime)."""
        return cls(
            year=when.year, month=when.month, day=when.day,
            hour=when.hour, minute=when.minute, second=when.second,
        )

    def pack(self) -> bytes:
        return self.STRUCT.pack(*astuple(self))

    @classmethod
    def unpack(cls, data: bytes, offset: int = 0) -> "SewFooter":
        return cls(*_unpack(cls.STRUCT, data, offset, "SEW footer"))


# ── WAV header ────────────────────────────────────────────────────────────────

@dataclass
class WavHeader:
    riff_magic:        bytes = WAV_RIFF_MAGIC
    file_size:         int = 0
    riff_type:         bytes = WAV_WAVE_MAGIC
    fmt_magic:         bytes = WAV_FMT_MAGIC
    chunk_size:        int = WAV_FMT_CHUNK_SIZE
    format_tag:        int = WAV_FORMAT_PCM
    channel_count:     int = 1
    sample_rate:       int = 0
    avg_bytes_per_sec: int = 0
    block_align:       int = WAV_BLOCK_ALIGN
    bits_per_sample:   int = WAV_BITS_PER_SAMPLE
    data_magic:        bytes = WAV_DATA_MAGIC
    data_size:         int = 0

    STRUCT = struct.Struct("<4si4s4sihhiihh4si")

    def pack(self) -> bytes:
        return self.STRUCT.pack(*astuple(self))

    @classmethod
    def unpack(cls, data: bytes, offset: int = 0) -> "WavHeader":
        return cls(*_unpack(cls.STRUCT, data, offset, "WAV header"))
