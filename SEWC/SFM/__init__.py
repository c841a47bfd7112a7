# =============================================================================
# SEWC/SFM/__init__.py — Sound File Module
# =============================================================================
#
# Reads, validates and builds the two containers the converter moves audio
# between.  Byte layouts come from SEWC/SMM/layout.py; the codec from
# SEWC/ACM.
#
# Modules:
#   sew_container.py — FWSE v3 .sew: header, loop blocks, payload, footer
#   wav_container.py — fixed 44-byte-header WAV with int32 sample slots
# =============================================================================
