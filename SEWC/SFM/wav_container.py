# =============================================================================
# wav_container.py — Fixed-layout WAV reader / writer
# =============================================================================
#
# The WAV side of the converter is deliberately minimal:
#
#   0x00  "RIFF", file_size, "WAVE"
#   0x0C  "fmt ", 16, format_tag=1, channels, rate, rate*4, block_align=4,
#         bits_per_sample=32
#   0x24  "data", data_size
#   0x2C  int32 samples, interleaved, each = 20-bit value << 12
#
# block_align and avg_bytes_per_sec are written for 4-byte frames even for
# stereo; readers of real FWSE output expect exactly these values.
# Anything else (16-bit PCM, float, extensible) is rejected, not converted.
# =============================================================================

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple, Sequence, Union

import numpy as np

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    WAV_RIFF_MAGIC, WAV_WAVE_MAGIC, WAV_FORMAT_PCM,
    WAV_BITS_PER_SAMPLE, WAV_BYTES_PER_SAMPLE, MAX_CHANNELS,
)
from SEWC.SMM.layout import WavHeader

WAV_HEADER_SIZE = WavHeader.STRUCT.size   # = 0x2C


class WavAudio(NamedTuple):
    samples:       np.ndarray   # int32, interleaved
    channel_count: int
    sample_rate:   int


def build_wav(samples: Sequence[int], channel_count: int, sample_rate: int) -> bytes:
    """Return a complete WAV image holding `samples` as int32 slots."""
    data = np.asarray(samples, dtype="<i4").tobytes()
    header = WavHeader(
        file_size=len(data) + WAV_HEADER_SIZE - 8,
        channel_count=channel_count,
        sample_rate=sample_rate,
        avg_bytes_per_sec=sample_rate * WAV_BYTES_PER_SAMPLE,
        data_size=len(data),
    )
    return header.pack() + data


def write_wav(
    path: Union[str, Path],
    samples: Sequence[int],
    channel_count: int,
    sample_rate: int,
) -> Path:
    path = Path(path)
    with open(path, "wb") as f:
        f.write(build_wav(samples, channel_count, sample_rate))
    return path


def validate_wav_header(header: WavHeader) -> None:
    """Raise ValidationError unless `header` describes a supported WAV."""
    if header.riff_magic != WAV_RIFF_MAGIC or header.riff_type != WAV_WAVE_MAGIC:
        raise ValidationError("This is no valid RIFF/WAVE file.")
    if header.format_tag != WAV_FORMAT_PCM:
        raise ValidationError(f"FormatTag must be {WAV_FORMAT_PCM}, got {header.format_tag}.")
    if header.bits_per_sample != WAV_BITS_PER_SAMPLE:
        raise ValidationError(
            f"Only {WAV_BITS_PER_SAMPLE}-bit sample slots are supported, "
            f"got {header.bits_per_sample}."
        )
    if not 1 <= header.channel_count <= MAX_CHANNELS:
        raise ValidationError(
            f"ChannelCount must be 1..{MAX_CHANNELS}, got {header.channel_count}."
        )


def parse_wav(data: bytes) -> WavAudio:
    """
    Parse a WAV image produced by build_wav() (or any file with the same
    fixed 44-byte layout).

    Samples run from 0x2C for data_size bytes; a data_size that is negative
    or larger than the file (streaming writers) means "to end of file".
    """
    header = WavHeader.unpack(data)
    validate_wav_header(header)

    remaining = len(data) - WAV_HEADER_SIZE
    size = header.data_size if 0 <= header.data_size <= remaining else remaining
    size -= size % WAV_BYTES_PER_SAMPLE

    body = data[WAV_HEADER_SIZE : WAV_HEADER_SIZE + size]
    samples = np.frombuffer(body, dtype="<i4").astype(np.int32)
    return WavAudio(samples, header.channel_count, header.sample_rate)


def read_wav(path: Union[str, Path]) -> WavAudio:
    with open(path, "rb") as f:
        data = f.read()
    return parse_wav(data)
