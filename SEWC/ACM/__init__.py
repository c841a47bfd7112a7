# =============================================================================
# SEWC/ACM/__init__.py — ADPCM Codec Module
# =============================================================================
#
# Stateful 4-bit predictive codec used by FWSE v3, plus the loop-state and
# crossfade blocks derived while encoding.
#
# Modules:
#   adpcm_codec.py    — CodecState, nibble encode/decode, channel passes,
#                       whole-payload encode/decode (mono + stereo)
#   interleave.py     — nibble packing, channel (de)interleaving
#   loop_crossfade.py — loop-state block and 32-frame crossfade block
#
# Tables live in SEWC/SMM/constants.py
# =============================================================================
