# =============================================================================
# SEW Conversion Engine (SEWC)
# Converts FWSE v3 (.sew) ADPCM audio to 32-bit-slot WAV and back.
# =============================================================================
#
# ── WHAT A .sew FILE HOLDS ────────────────────────────────────────────────────
#
#   - A 4-bit ADPCM payload.  Mono packs two codes per byte; stereo packs
#     ch0 in the high nibble and ch1 in the low nibble of every byte.
#   - A loop-state block: the codec state (predictor, step index) at
#     loop_start + 32 for each channel, so a player can restart decoding at
#     the loop without replaying the whole stream.
#   - A 32-frame crossfade block blending the loop_end neighbourhood into the
#     loop_start neighbourhood, spliced in by the player to hide the seam.
#   - A "tIME" / "ver." footer.
#
# ── SAMPLE REPRESENTATION ─────────────────────────────────────────────────────
#
#   Everywhere inside SEWC a sample is an int32 whose top 20 bits hold the
#   predictor value (value << 12).  The WAV side stores these words as-is:
#   bits_per_sample = 32, block_align = 4.  It is NOT 16-bit PCM.
#
# ── DATA FLOW ─────────────────────────────────────────────────────────────────
#
#   decode:  SewFile.open → decode_payload (per channel) → interleave → write_wav
#   encode:  read_wav → deinterleave → encode_channel (per channel, captures
#            loop state) → build_loop_blocks → build_sew
#
# ── Module layout ─────────────────────────────────────────────────────────────
#   SMM/  — codec tables, container constants, header/footer byte layouts
#   ACM/  — ADPCM codec, nibble/channel interleaving, loop + crossfade blocks
#   SFM/  — .sew and .wav containers
#   SVM/  — self-validation suite
#   errors.py  — ValidationError / UsageError
#   convert.py — command-line converter
# =============================================================================
