import math

import numpy as np
import pytest

from SEWC.ACM.adpcm_codec import (
    CodecState,
    LoopState,
    decode_channel,
    decode_nibble,
    decode_payload,
    encode_channel,
    encode_nibble,
    encode_payload,
    wrap_int32,
)
from SEWC.ACM.interleave import deinterleave, interleave, split_nibbles
from SEWC.errors import ValidationError
from SEWC.SMM.constants import STEP_INDEX_MAX, STEP_TABLE

REFERENCE = [0, 65536, -65536, 0]


def _sine(frames: int, amplitude: int, period: int, phase: float = 0.0) -> list[int]:
    return [int(amplitude * math.sin(2 * math.pi * i / period + phase)) << 12 for i in range(frames)]


def test_decode_nibble_from_rest() -> None:
    state = CodecState()
    assert decode_nibble(15, state) == 105 << 12
    assert state == CodecState(105, 8)

    state = CodecState()
    assert decode_nibble(0, state) == -105 << 12
    assert state == CodecState(-105, 8)


def test_decode_nibble_middle_codes_shrink_step() -> None:
    state = CodecState(0, 10)
    decode_nibble(7, state)
    assert state.predicted_sample == -STEP_TABLE[10]
    assert state.step_index == 9


def test_step_index_never_leaves_table() -> None:
    state = CodecState()
    for _ in range(1000):
        decode_nibble(6, state)
        assert state.step_index == 0

    for _ in range(200):
        decode_nibble(15, state)
    assert state.step_index == STEP_INDEX_MAX

    rng = np.random.default_rng(7)
    for n in rng.integers(0, 16, size=10_000).tolist():
        decode_nibble(n, state)
        assert 0 <= state.step_index <= STEP_INDEX_MAX


@pytest.mark.parametrize(
    "samples",
    [
        [2**31 - 1, -(2**31 - 1)] * 2000,
        [-(2**31)] * 4000,
        [2**31 - 1] * 4000,
    ],
    ids=["alternating-extremes", "constant-min", "constant-max"],
)
def test_encoder_step_index_never_leaves_table(samples: list[int]) -> None:
    state = CodecState()
    for sample in samples:
        nibble = encode_nibble(sample, state)
        assert 0 <= nibble <= 15
        assert 0 <= state.step_index <= STEP_INDEX_MAX


def test_predictor_wraps_like_int32() -> None:
    state = CodecState()
    for _ in range(6000):
        sample = decode_nibble(15, state)
        assert -(2**31) <= sample < 2**31
        assert -(2**31) <= state.predicted_sample < 2**31
    assert wrap_int32(2**31) == -(2**31)
    assert wrap_int32(-(2**31) - 1) == 2**31 - 1


def test_encode_nibble_reference_codes() -> None:
    state = CodecState()
    codes = [encode_nibble(s, state) for s in REFERENCE]
    assert codes == [8, 8, 5, 9]
    assert state == CodecState(0, 0)


def test_encoder_state_matches_decoder_state() -> None:
    enc_state, dec_state = CodecState(), CodecState()
    for sample in _sine(500, 60_000, 41):
        n = encode_nibble(sample, enc_state)
        decode_nibble(n, dec_state)
        assert enc_state == dec_state


def test_unsaturated_codes_stay_within_one_step() -> None:
    state = CodecState()
    for sample in _sine(3000, 100_000, 97):
        step = STEP_TABLE[state.step_index]
        n = encode_nibble(sample, state)
        if 0 < n < 15:
            assert abs((sample >> 12) - state.predicted_sample) <= step


def test_encode_channel_packs_high_nibble_first() -> None:
    encoded = encode_channel(REFERENCE)
    assert encoded.payload == b"\x88\x59"
    assert encoded.loop_state is None


def test_encode_channel_odd_length_zero_fills_low_nibble() -> None:
    encoded = encode_channel(REFERENCE[:3])
    assert encoded.payload == b"\x88\x50"


def test_decode_mono_payload_trims_to_sample_count() -> None:
    decoded = decode_payload(b"\x88\x50", 1, 3)
    assert decoded.dtype == np.int32
    assert decoded.tolist() == [7 << 12, 14 << 12, -21 << 12]
    assert len(decode_payload(b"\x88\x50", 1)) == 4


def test_mono_round_trip_within_step() -> None:
    decoded = decode_payload(encode_channel(REFERENCE).payload, 1, 4)
    assert decoded.tolist() == [7 << 12, 14 << 12, -21 << 12, 0]
    for original, restored in zip(REFERENCE, decoded.tolist()):
        assert abs((original >> 12) - (restored >> 12)) <= STEP_TABLE[0]


def test_stereo_payload_layout() -> None:
    samples = interleave([REFERENCE, [0, 0, 0, 0]])
    encoded = encode_payload(samples, 2)
    assert encoded.payload == bytes([0x88, 0x87, 0x58, 0x97])

    decoded = decode_payload(encoded.payload, 2, 4)
    left, right = deinterleave(decoded, 2)
    assert left.tolist() == [v << 12 for v in (7, 14, -21, 0)]
    assert right.tolist() == [v << 12 for v in (7, 0, 7, 0)]


def test_stereo_channels_decode_independently() -> None:
    left, right = _sine(257, 40_000, 50), _sine(257, 25_000, 33, 0.5)
    encoded = encode_payload(interleave([left, right]), 2)
    decoded = deinterleave(decode_payload(encoded.payload, 2, 257), 2)

    assert decoded[0].tolist() == decode_channel(split_nibbles(encode_channel(left).payload))[:257]
    assert decoded[1].tolist() == decode_channel(split_nibbles(encode_channel(right).payload))[:257]


def test_loop_state_captured_at_loop_start_plus_32() -> None:
    left, right = _sine(120, 70_000, 40), _sine(120, 9_000, 23)
    encoded = encode_payload(interleave([left, right]), 2, loop_start=10)

    expected = []
    for channel in (left, right):
        state = CodecState()
        for sample in channel[:42]:
            encode_nibble(sample, state)
        expected.append(state.snapshot())

    assert encoded.loop_states == expected
    assert all(isinstance(s, LoopState) for s in encoded.loop_states)
    assert encoded.loop_states[0] != encoded.loop_states[1]


def test_loop_state_missing_when_stream_too_short() -> None:
    assert encode_channel(_sine(40, 1000, 16), loop_start=10).loop_state is None
    assert encode_channel(_sine(80, 1000, 16), loop_start=-1).loop_state is None


@pytest.mark.parametrize("channels", [0, 3])
def test_channel_count_out_of_range(channels: int) -> None:
    with pytest.raises(ValidationError):
        decode_payload(b"\x00", channels)
    with pytest.raises(ValidationError):
        encode_payload([0, 0, 0], channels)
