# =============================================================================
# constants.py — SMM Codec Tables and Container Layout Constants
# =============================================================================
#
# Every number the codec and the two containers depend on lives here.
# The tables must match the FWSE v3 reference byte-for-byte: a single wrong
# step size desynchronises every sample decoded after it.

# -----------------------------------------------------------------------------
# ADPCM TABLES
# -----------------------------------------------------------------------------

# Step-index adjustment per 4-bit code.  Note the layout: the outermost codes
# (0 and 15, the largest deltas in either direction) grow the step, the middle
# codes shrink it.  This is NOT the standard IMA sign/magnitude index table.
INDEX_TABLE = [
    8, 6, 4, 2, -1, -1, -1, -1,
    -1, -1, -1, -1, 2, 4, 6, 8,
]

# Quantiser step sizes (standard IMA table, 89 entries, 7 .. 32767)
STEP_TABLE = [
    7, 8, 9, 10, 11, 12, 13, 14,
    16, 17, 19, 21, 23, 25, 28, 31,
    34, 37, 41, 45, 50, 55, 60, 66,
    73, 80, 88, 97, 107, 118, 130, 143,
    157, 173, 190, 209, 230, 253, 279, 307,
    337, 371, 408, 449, 494, 544, 598, 658,
    724, 796, 876, 963, 1060, 1166, 1282, 1411,
    1552, 1707, 1878, 2066, 2272, 2499, 2749, 3024,
    3327, 3660, 4026, 4428, 4871, 5358, 5894, 6484,
    7132, 7845, 8630, 9493, 10442, 11487, 12635, 13899,
    15289, 16818, 18500, 20350, 22385, 24623, 27086, 29794,
    32767,
]

STEP_INDEX_MIN = 0
STEP_INDEX_MAX = len(STEP_TABLE) - 1     # = 88

NIBBLE_MIN = 0
NIBBLE_MAX = 15
NIBBLE_BIAS = 8                          # encoder centres its code on 8

# -----------------------------------------------------------------------------
# SAMPLE REPRESENTATION
# -----------------------------------------------------------------------------
# One sample = 20-bit predictor value shifted into the top of a 32-bit word.
# WAV output keeps these 32-bit slots as-is (bits_per_sample = 32).

SAMPLE_SHIFT = 12
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1

# -----------------------------------------------------------------------------
# LOOP / CROSSFADE
# -----------------------------------------------------------------------------

CROSSFADE_FRAMES  = 32        # frames blended across the loop seam
LOOP_STATE_OFFSET = 32        # codec state is captured at loop_start + 32
LOOP_SLOTS        = 6         # slots reserved per field in the loop block
LOOP_BLOCK_INTS   = 2 * LOOP_SLOTS                     # = 12
CROSSFADE_INTS    = LOOP_SLOTS * CROSSFADE_FRAMES      # = 192
NO_LOOP           = -1

# -----------------------------------------------------------------------------
# SEW CONTAINER  (FWSE v3)
# -----------------------------------------------------------------------------

SEW_MAGIC         = b"FWSE"
SEW_VERSION       = 3
SEW_DATA_OFFSET   = 0x400
SEW_ALIGNMENT     = 0x100
SEW_UNK1          = 0x10
MAX_CHANNELS      = 2

FOOTER_TIME_MAGIC = b"tIME"
FOOTER_TIME_LEN   = 8
FOOTER_VER_MAGIC  = b"ver."
FOOTER_VER_LEN    = 4

# -----------------------------------------------------------------------------
# WAV CONTAINER  (fixed 44-byte header, int32 slots)
# -----------------------------------------------------------------------------

WAV_RIFF_MAGIC      = b"RIFF"
WAV_WAVE_MAGIC      = b"WAVE"
WAV_FMT_MAGIC       = b"fmt "
WAV_DATA_MAGIC      = b"data"
WAV_FMT_CHUNK_SIZE  = 0x10
WAV_FORMAT_PCM      = 1
WAV_BLOCK_ALIGN     = 4
WAV_BITS_PER_SAMPLE = 32
WAV_BYTES_PER_SAMPLE = WAV_BITS_PER_SAMPLE // 8
