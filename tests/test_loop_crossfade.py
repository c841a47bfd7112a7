import struct

import pytest

from SEWC.ACM.adpcm_codec import LoopState
from SEWC.ACM.interleave import interleave
from SEWC.ACM.loop_crossfade import LoopBlocks, build_loop_blocks
from SEWC.errors import ValidationError


def _ramp(frames: int, scale: int = 100) -> list[int]:
    return [(i * scale) << 12 for i in range(frames)]


@pytest.mark.parametrize("loop_start, loop_end", [(-1, 100), (0, -1), (-1, -1)])
def test_blocks_zero_without_both_loop_points(loop_start: int, loop_end: int) -> None:
    blocks = build_loop_blocks(_ramp(200), 1, loop_start, loop_end, [LoopState(5, 3)])
    assert blocks == LoopBlocks.empty()
    assert blocks.loop_state_bytes() == bytes(12 * 4)
    assert blocks.crossfade_bytes() == bytes(6 * 32 * 4)


def test_crossfade_weights_mono() -> None:
    blocks = build_loop_blocks(_ramp(200), 1, 0, 100, [None])
    assert blocks.crossfade[0] == 10_000
    assert blocks.crossfade[1] == (100 * 1 + 10_100 * 31) // 32
    assert blocks.crossfade[31] == 3412
    assert blocks.crossfade[32:] == [0] * (192 - 32)


def test_crossfade_truncates_toward_zero() -> None:
    negative = [-v for v in _ramp(200)]
    blocks = build_loop_blocks(negative, 1, 0, 100, [None])
    assert blocks.crossfade[31] == -3412


def test_crossfade_stereo_interleaved_per_frame() -> None:
    left, right = _ramp(150, 10), _ramp(150, -20)
    blocks = build_loop_blocks(interleave([left, right]).tolist(), 2, 5, 60, [None, None])
    for j in range(32):
        expected_l = int(((5 + j) * 10 * j + (60 + j) * 10 * (32 - j)) / 32)
        expected_r = int(((5 + j) * -20 * j + (60 + j) * -20 * (32 - j)) / 32)
        assert blocks.crossfade[2 * j] == expected_l
        assert blocks.crossfade[2 * j + 1] == expected_r


def test_loop_state_slots() -> None:
    states = [LoopState(-1234, 17), LoopState(99, 42)]
    blocks = build_loop_blocks(interleave([_ramp(64), _ramp(64)]), 2, 0, 10, states)
    assert blocks.loop_state == [-1234, 99, 0, 0, 0, 0, 17, 42, 0, 0, 0, 0]

    assert list(struct.unpack("<12i", blocks.loop_state_bytes())) == blocks.loop_state
    assert struct.unpack("<192i", blocks.crossfade_bytes()) == (0,) * 192


def test_loop_state_slot_left_zero_when_not_captured() -> None:
    blocks = build_loop_blocks(_ramp(64), 1, 0, 10, [None])
    assert blocks.loop_state == [0] * 12


def test_loop_window_past_end_rejected() -> None:
    with pytest.raises(ValidationError):
        build_loop_blocks(_ramp(100), 1, 0, 90, [None])
