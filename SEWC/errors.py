# =============================================================================
# errors.py — SEWC error taxonomy
# =============================================================================
#
# Library code raises these; only the CLI boundary (SEWC/convert.py) turns
# them into a printed diagnostic and a process exit code.
# =============================================================================


class SEWCError(Exception):
    """Base class for every error raised by SEWC."""


class ValidationError(SEWCError, ValueError):
    """
    Input file or stream does not match the supported format: bad magic,
    unsupported version, channel count out of range, wrong sample width,
    truncated data, or loop points outside the sample stream.
    """


class UsageError(SEWCError, ValueError):
    """Missing or invalid command-line arguments."""
