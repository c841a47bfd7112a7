import math
from pathlib import Path

import pytest

from SEWC.convert import (
    build_parser,
    decode_sew_to_wav,
    encode_wav_to_sew,
    main,
    parse_loop_point,
)
from SEWC.errors import UsageError, ValidationError
from SEWC.SFM.sew_container import SewFile
from SEWC.SFM.wav_container import read_wav, write_wav


def _write_source_wav(path: Path, channels: int = 1, frames: int = 400) -> list[int]:
    samples = []
    for i in range(frames):
        for ch in range(channels):
            samples.append(int(50_000 * math.sin(2 * math.pi * i / (60 + 13 * ch))) << 12)
    write_wav(path, samples, channels, 32_000)
    return samples


def test_encode_then_decode_paths(tmp_path: Path) -> None:
    wav_path = tmp_path / "voice.wav"
    samples = _write_source_wav(wav_path, channels=2)

    sew_path = encode_wav_to_sew(wav_path, 3, 20, 300)
    assert sew_path == tmp_path / "voice.sew"
    sew = SewFile.open(sew_path)
    assert (sew.channel_count, sew.sample_count, sew.sample_rate) == (2, 400, 32_000)
    assert (sew.loop_start, sew.loop_end) == (20, 300)

    out_path = decode_sew_to_wav(sew_path, tmp_path / "decoded.wav", verbose=False)
    decoded = read_wav(out_path)
    assert decoded.channel_count == 2
    assert len(decoded.samples) == len(samples)


def test_decode_prints_meta(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    wav_path = tmp_path / "a.wav"
    _write_source_wav(wav_path)
    sew_path = encode_wav_to_sew(wav_path)
    decode_sew_to_wav(sew_path)
    out = capsys.readouterr().out
    assert "Channels: 1" in out
    assert "LoopStart: -1" in out
    assert (tmp_path / "a.wav").exists()


def test_encode_rejects_other_versions(tmp_path: Path) -> None:
    wav_path = tmp_path / "a.wav"
    _write_source_wav(wav_path)
    with pytest.raises(ValidationError):
        encode_wav_to_sew(wav_path, version=2)
    with pytest.raises(UsageError):
        encode_wav_to_sew(wav_path, version=-1)


@pytest.mark.parametrize("text, expected", [("12", 12), ("0", 0), ("-4", -1), ("abc", -1), ("", -1)])
def test_parse_loop_point(text: str, expected: int) -> None:
    assert parse_loop_point(text) == expected


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["encode", "in.wav"])
    assert (args.version, args.loop_start, args.loop_end, args.output) == (3, -1, -1, None)


def test_parser_rejects_bad_version_and_mode() -> None:
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["encode", "in.wav", "-2"])
    assert exc.value.code == 2
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["encode", "in.wav", "x"])
    assert exc.value.code == 2
    with pytest.raises(SystemExit):
        build_parser().parse_args(["play", "in.wav"])


def test_main_exit_codes(tmp_path: Path) -> None:
    wav_path = tmp_path / "a.wav"
    _write_source_wav(wav_path)

    with pytest.raises(SystemExit) as exc:
        main(["encode", str(wav_path), "3", "5", "100", "-o", str(tmp_path / "out.sew")])
    assert exc.value.code == 0
    assert SewFile.open(tmp_path / "out.sew").loop_end == 100

    with pytest.raises(SystemExit) as exc:
        main(["decode", str(wav_path)])
    assert exc.value.code == 1

    with pytest.raises(SystemExit) as exc:
        main(["decode", str(tmp_path / "missing.sew")])
    assert exc.value.code == 1
