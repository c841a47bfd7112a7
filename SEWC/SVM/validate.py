#!/usr/bin/env python3
# =============================================================================
# validate.py — SEWC Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m SEWC.SVM.validate
#             or python SEWC/SVM/validate.py (from project root)
#
# Tests:
#   1. Tables integrity      — step/index tables match the FWSE v3 reference
#   2. Nibble codec          — known values, index clamp, closed-loop encoder
#   3. Channel codec         — quantisation bound, stereo layout, interleave
#   4. Loop blocks           — zero placeholders, crossfade ramp, loop state
#   5. Containers            — .sew / .wav byte layout end to end
#   6. soundfile cross-check — libsndfile reads our WAV back identically
# =============================================================================

import sys
import os
import math
import struct
import tempfile
from datetime import datetime

# Allow running from project root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import numpy as np
import soundfile as sf

from SEWC.errors import ValidationError
from SEWC.SMM.constants import (
    INDEX_TABLE, STEP_TABLE, STEP_INDEX_MAX, SAMPLE_SHIFT,
    SEW_DATA_OFFSET, LOOP_BLOCK_INTS, CROSSFADE_INTS,
)
from SEWC.SMM.layout import SewHeader, SewFooter, WavHeader
from SEWC.ACM.adpcm_codec import (
    CodecState, decode_nibble, encode_nibble,
    encode_channel, encode_payload, decode_payload,
)
from SEWC.ACM.interleave import interleave, deinterleave, split_nibbles, pack_nibbles
from SEWC.ACM.loop_crossfade import build_loop_blocks
from SEWC.SFM.sew_container import SewFile, build_sew
from SEWC.SFM.wav_container import build_wav, parse_wav, write_wav

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

failures = 0

def check(label: str, condition: bool, detail: str = "") -> bool:
    global failures
    if condition:
        print(f"  {PASS} {label}")
    else:
        print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
        failures += 1
    return condition


def sine(frames: int, amplitude: int, period: int, phase: float = 0.0) -> list:
    return [int(amplitude * math.sin(2 * math.pi * i / period + phase)) << SAMPLE_SHIFT
            for i in range(frames)]


# =============================================================================
# TEST 1 — Tables Integrity
# =============================================================================
print("\n" + "="*60)
print("TEST 1 — Tables Integrity")
print("="*60)

check("STEP_TABLE has 89 entries",        len(STEP_TABLE) == 89, f"got {len(STEP_TABLE)}")
check("STEP_TABLE starts at 7",           STEP_TABLE[0] == 7)
check("STEP_TABLE ends at 32767",         STEP_TABLE[-1] == 32767)
check("STEP_TABLE strictly increasing",
      all(a < b for a, b in zip(STEP_TABLE, STEP_TABLE[1:])))
check("STEP_TABLE[80] = 15289",           STEP_TABLE[80] == 15289,
      f"got {STEP_TABLE[80]}")
check("INDEX_TABLE has 16 entries",       len(INDEX_TABLE) == 16)
check("INDEX_TABLE symmetric",            INDEX_TABLE == INDEX_TABLE[::-1])
check("INDEX_TABLE edges grow by 8",      INDEX_TABLE[0] == 8 and INDEX_TABLE[15] == 8)
check("SewHeader is 40 bytes",            SewHeader.STRUCT.size == 0x28)
check("SewFooter is 28 bytes",            SewFooter.STRUCT.size == 28)
check("WavHeader is 44 bytes",            WavHeader.STRUCT.size == 0x2C)


# =============================================================================
# TEST 2 — Nibble Codec
# =============================================================================
print("\n" + "="*60)
print("TEST 2 — Nibble Codec")
print("="*60)

st = CodecState()
out = decode_nibble(15, st)
check("Code 15 from rest: pred = +105",   st.predicted_sample == 105, f"got {st.predicted_sample}")
check("Code 15 from rest: idx = 8",       st.step_index == 8)
check("Code 15 from rest: sample = 105<<12", out == 105 << 12)

st = CodecState()
decode_nibble(0, st)
check("Code 0 from rest: pred = -105",    st.predicted_sample == -105)

# --- Index clamp under adversarial streams ---
st = CodecState()
pinned = True
for _ in range(500):
    decode_nibble(5, st)
    pinned &= st.step_index == 0
check("Repeated -1 codes: idx pinned at 0", pinned)

st = CodecState()
in_range = True
for _ in range(6000):
    s = decode_nibble(15, st)
    in_range &= 0 <= st.step_index <= STEP_INDEX_MAX and -2**31 <= s < 2**31
check("Repeated +8 codes: idx <= 88, output stays int32", in_range)
check("Repeated +8 codes: idx saturates at 88", st.step_index == STEP_INDEX_MAX)

rng = np.random.default_rng(1234)
st = CodecState()
bounded = True
for n in rng.integers(0, 16, size=20_000).tolist():
    decode_nibble(n, st)
    bounded &= 0 <= st.step_index <= STEP_INDEX_MAX
check("Random code stream: idx always in [0, 88]", bounded)

# --- Closed loop: encoder state == decoder state after each code ---
enc_state, dec_state = CodecState(), CodecState()
lockstep = True
for sample in sine(400, 30_000, 37):
    n = encode_nibble(sample, enc_state)
    decode_nibble(n, dec_state)
    lockstep &= enc_state == dec_state
check("Closed loop: encoder and decoder states identical", lockstep)


# =============================================================================
# TEST 3 — Channel Codec
# =============================================================================
print("\n" + "="*60)
print("TEST 3 — Channel Codec")
print("="*60)

# The four-sample reference stream: [0, 16, -16, 0] in 20-bit units
ref = [0, 65536, -65536, 0]
encoded = encode_channel(ref)
check("Reference stream codes = 88 59",   encoded.payload == bytes([0x88, 0x59]),
      f"got {encoded.payload.hex()}")
decoded = decode_payload(encoded.payload, 1, len(ref))
check("Reference stream decodes to [7,14,-21,0]<<12",
      decoded.tolist() == [v << SAMPLE_SHIFT for v in (7, 14, -21, 0)],
      f"got {[v >> SAMPLE_SHIFT for v in decoded.tolist()]}")
check("Reference stream within one step (7)",
      all(abs((a >> 12) - (b >> 12)) <= 7 for a, b in zip(ref, decoded.tolist())))

# --- Quantisation bound for unsaturated codes ---
st = CodecState()
worst = 0.0
for sample in sine(2_000, 80_000, 113):
    step = STEP_TABLE[st.step_index]
    n = encode_nibble(sample, st)
    if 0 < n < 15:
        worst = max(worst, abs((sample >> SAMPLE_SHIFT) - st.predicted_sample) / step)
check("Unsaturated codes land within one step", worst <= 1.0, f"worst = {worst:.3f} steps")

# --- Odd length pads the last low nibble ---
odd = encode_channel(ref[:3])
check("Odd length: 2 bytes, low nibble of last = 0",
      len(odd.payload) == 2 and odd.payload[1] & 0x0F == 0)
check("Odd length: decode trims pad code",
      len(decode_payload(odd.payload, 1, 3)) == 3)

# --- Stereo layout ---
left, right = sine(300, 40_000, 50), sine(300, 20_000, 31, 1.0)
stereo = interleave([left, right]).tolist()
enc2 = encode_payload(stereo, 2)
nib_l = split_nibbles(encode_channel(left).payload)
nib_r = split_nibbles(encode_channel(right).payload)
check("Stereo: ch0 high nibble, ch1 low nibble",
      enc2.payload == bytes((a << 4) | b for a, b in zip(nib_l, nib_r)))
dec2 = decode_payload(enc2.payload, 2, 300)
ch = deinterleave(dec2, 2)
check("Stereo: each channel decodes as its own mono pass",
      ch[0].tolist() == decode_payload(encode_channel(left).payload, 1, 300).tolist()
      and ch[1].tolist() == decode_payload(encode_channel(right).payload, 1, 300).tolist())

# --- Interleave round trip ---
frames = [list(range(0, 50)), list(range(100, 150))]
rt = deinterleave(interleave(frames), 2)
check("deinterleave(interleave(x)) == x", [c.tolist() for c in rt] == frames)
check("pack_nibbles inverts split_nibbles",
      pack_nibbles(split_nibbles(b"\x12\xab\xf0")) == b"\x12\xab\xf0")


# =============================================================================
# TEST 4 — Loop Blocks
# =============================================================================
print("\n" + "="*60)
print("TEST 4 — Loop Blocks")
print("="*60)

ramp = [(i * 100) << SAMPLE_SHIFT for i in range(200)]
blocks = build_loop_blocks(ramp, 1, -1, 100, [None])
check("No loop_start: blocks all zero",
      not any(blocks.loop_state) and not any(blocks.crossfade))
blocks = build_loop_blocks(ramp, 1, 0, -1, [None])
check("No loop_end: blocks all zero",
      not any(blocks.loop_state) and not any(blocks.crossfade))
check("Placeholder sizes 12 + 192 ints",
      len(blocks.loop_state) == LOOP_BLOCK_INTS and len(blocks.crossfade) == CROSSFADE_INTS)
check("Placeholder bytes = 0x30 + 0x300",
      len(blocks.loop_state_bytes()) == 0x30 and len(blocks.crossfade_bytes()) == 0x300)

blocks = build_loop_blocks(ramp, 1, 0, 100, [None])
check("Crossfade j=0 = loop_end sample", blocks.crossfade[0] == 10_000,
      f"got {blocks.crossfade[0]}")
check("Crossfade j=31 = (3100*31 + 13100) / 32 = 3412", blocks.crossfade[31] == 3412,
      f"got {blocks.crossfade[31]}")
neg = build_loop_blocks([-v for v in ramp], 1, 0, 100, [None])
check("Crossfade truncates toward zero (-3412, not -3413)", neg.crossfade[31] == -3412,
      f"got {neg.crossfade[31]}")

stereo_loop = interleave([sine(200, 50_000, 40), sine(200, 10_000, 25)]).tolist()
enc_loop = encode_payload(stereo_loop, 2, loop_start=10)
expected = []
for c in deinterleave(stereo_loop, 2):
    st = CodecState()
    for sample in c.tolist()[:42]:
        encode_nibble(sample, st)
    expected.append(st.snapshot())
check("Stereo loop state captured at frame 42 per channel",
      enc_loop.loop_states == expected, f"{enc_loop.loop_states} != {expected}")


# =============================================================================
# TEST 5 — Containers
# =============================================================================
print("\n" + "="*60)
print("TEST 5 — Containers")
print("="*60)

stamp = datetime(2024, 5, 17, 12, 30, 45)
image = build_sew(ref, 1, 32_000, timestamp=stamp)
sew = SewFile.from_bytes(image)
check("SEW: sample_count = 4",           sew.sample_count == 4)
check("SEW: channel_count = 1",          sew.channel_count == 1)
check("SEW: footer_offset = 0x402",      sew.header.footer_offset == SEW_DATA_OFFSET + 2)
check("SEW: file length = 0x402 + 28",   len(image) == SEW_DATA_OFFSET + 2 + 28)
check("SEW: payload at 0x400",           image[0x400:0x402] == b"\x88\x59")
check("SEW: footer timestamp",           sew.timestamp == stamp)
check("SEW: decode within one step",
      all(abs((a >> 12) - (b >> 12)) <= 7 for a, b in zip(ref, sew.decode().tolist())))

bad = bytearray(image); bad[0:4] = b"FWSX"
try:
    SewFile.from_bytes(bytes(bad))
    check("SEW: bad magic rejected", False)
except ValidationError:
    check("SEW: bad magic rejected", True)

bad = bytearray(image); bad[4] = 2
try:
    SewFile.from_bytes(bytes(bad))
    check("SEW: version 2 rejected", False)
except ValidationError:
    check("SEW: version 2 rejected", True)

looped = build_sew(stereo_loop, 2, 44_100, 10, 120, timestamp=stamp)
sew_l = SewFile.from_bytes(looped)
check("SEW: loop states read back", sew_l.loop_states == expected)
check("SEW: loop bounds read back", (sew_l.loop_start, sew_l.loop_end) == (10, 120))
raw_states = struct.unpack_from("<12i", looped, 0x40)
check("SEW: loop-state block at 0x40",
      [(raw_states[ch], raw_states[ch + 6]) for ch in range(2)] == [tuple(s) for s in expected])
check("SEW: crossfade block at 0xC0",
      list(struct.unpack_from("<64i", looped, 0xC0)) == sew_l.crossfade)
check("SEW: gaps around blocks zero",
      not any(looped[0x28:0x40]) and not any(looped[0x70:0xC0]) and not any(looped[0x3C0:0x400]))

wav_bytes = build_wav(ref, 1, 32_000)
wav = parse_wav(wav_bytes)
check("WAV: 44-byte header + 16 data bytes", len(wav_bytes) == 60)
check("WAV: samples round trip",         wav.samples.tolist() == ref)


# =============================================================================
# TEST 6 — soundfile Cross-check
# =============================================================================
print("\n" + "="*60)
print("TEST 6 — soundfile Cross-check")
print("="*60)

with tempfile.TemporaryDirectory() as tmp:
    path = os.path.join(tmp, "mono.wav")
    mono = sine(1_000, 300_000, 64)
    write_wav(path, mono, 1, 22_050)
    info = sf.info(path)
    print(f"  {INFO} libsndfile sees: {info.samplerate} Hz, {info.channels} ch, {info.subtype}")
    data, sr = sf.read(path, dtype="int32", always_2d=True)
    check("soundfile: sample rate", sr == 22_050)
    check("soundfile: PCM_32 subtype", info.subtype == "PCM_32", info.subtype)
    check("soundfile: samples identical", data[:, 0].tolist() == mono)


# =============================================================================
# Summary
# =============================================================================
print("\n" + "="*60)
if failures == 0:
    print(f"  ALL TESTS PASSED")
else:
    print(f"  {failures} TEST(S) FAILED")
print("="*60 + "\n")
sys.exit(0 if failures == 0 else 1)
