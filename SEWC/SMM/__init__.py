# =============================================================================
# SEWC/SMM/__init__.py — Sample Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for the FWSE v3 codec tables and the
# byte layouts of every header and footer the converter reads or writes.
#
# All other SEWC sub-modules (ACM, SFM, etc.) import exclusively from here.
# Never define format constants outside this module.
#
# Sub-modules:
#   constants.py  — ADPCM tables, sample shift, loop and container constants
#   layout.py     — SewHeader / SewFooter / WavHeader pack + unpack
# =============================================================================
