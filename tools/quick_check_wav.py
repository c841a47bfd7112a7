"""
Quick numeric checker for a WAV decoded from .sew.
Usage: python tools/quick_check_wav.py path/to/file.wav

Samples are 32-bit slots holding 20-bit values << 12, so the report shows
both the raw int32 peak and the 20-bit magnitude.
"""
import sys
import soundfile as sf
import numpy as np

if len(sys.argv) < 2:
    print("Usage: python tools/quick_check_wav.py file.wav")
    raise SystemExit

f = sys.argv[1]
info = sf.info(f)
data, sr = sf.read(f, dtype='int32', always_2d=True)
n_ch = data.shape[1]
duration = data.shape[0] / sr if sr else 0.0

print("=" * 60)
print(f"File        : {f}")
print(f"Subtype     : {info.subtype}")
print(f"Sample rate : {sr} Hz")
print(f"Channels    : {n_ch}")
print(f"Frames      : {data.shape[0]}")
print(f"Duration    : {duration:.2f} s")
print("=" * 60)

for i in range(n_ch):
    ch = data[:, i].astype(np.int64)
    raw20 = ch >> 12
    peak = np.max(np.abs(ch)) if len(ch) else 0
    peak20 = np.max(np.abs(raw20)) if len(ch) else 0
    rms20 = np.sqrt(np.mean(raw20.astype(np.float64) ** 2)) if len(ch) else 0.0
    low_bits = np.count_nonzero(ch & 0xFFF)
    print(f"  Ch{i}: peak={peak}  peak20={peak20}  rms20={rms20:.1f}")
    if low_bits:
        print(f"  Ch{i}: {low_bits} samples use the low 12 bits <-- not SEW-decoded audio")

if info.subtype != "PCM_32":
    print()
    print(f"  [!!] Expected PCM_32, got {info.subtype}; the encoder will reject this file")

print("=" * 60)
