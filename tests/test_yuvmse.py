import io

import numpy as np
import pytest

from framekit.framestats import psnr
from framekit.yuvmse import (
    Mode,
    Settings,
    YuvError,
    assess,
    frame_size,
    iter_frames,
    main,
    sequence_bestmatch,
    sequence_dct_hashes,
    sequence_mse,
)

W = 16
H = 16
FRAME = frame_size(W, H)


def _frames(count, seed):
    rng = np.random.default_rng(seed)
    return [rng.integers(0, 256, size=FRAME, dtype=np.uint8).tobytes() for _ in range(count)]


def _write(path, frames):
    path.write_bytes(b"".join(frames))
    return str(path)


def _settings(first, second=None, **kwargs):
    return Settings(first=first, second=second, width=W, height=H, **kwargs)


def test_frame_size_matches_plane_layout():
    assert frame_size(W, H) == W * H + 2 * (W // 2) * (H // 2)


def test_frame_size_rejects_zero():
    with pytest.raises(YuvError):
        frame_size(0, 16)


@pytest.mark.parametrize(
    "distance, expected",
    [(0, "Exact Match"), (1, "Near Identical"), (10, "Near Identical"), (11, "Different")],
)
def test_assess(distance, expected):
    assert assess(distance) == expected


def test_iter_frames_drops_partial_frame(tmp_path):
    frames = _frames(2, 1)
    path = tmp_path / "a.yuv"
    path.write_bytes(b"".join(frames) + frames[0][: FRAME // 2])
    assert list(iter_frames(str(path), FRAME)) == frames


def test_sequence_mse_identical(tmp_path):
    frames = _frames(2, 2)
    a = _write(tmp_path / "a.yuv", frames)
    b = _write(tmp_path / "b.yuv", frames)
    out = io.StringIO()
    stats = sequence_mse(_settings(a, b), out)
    assert len(stats) == 2
    assert all(s.y_mse == 0.0 and s.hashes[0] == s.hashes[1] for s in stats)
    rows = [line for line in out.getvalue().splitlines() if not line.startswith("#")]
    assert len(rows) == 2
    assert all("inf" in row and row.endswith("Exact Match") for row in rows)
    assert rows[1].startswith("00000001,")


def test_sequence_mse_different(tmp_path):
    a = _write(tmp_path / "a.yuv", _frames(1, 3))
    b = _write(tmp_path / "b.yuv", _frames(1, 4))
    stats = sequence_mse(_settings(a, b), io.StringIO())
    assert stats[0].y_mse > 0
    assert stats[0].y_psnr == psnr(stats[0].y_mse, 255.0)


def test_sequence_mse_header_repeats(tmp_path):
    frames = _frames(27, 5)
    a = _write(tmp_path / "a.yuv", frames)
    b = _write(tmp_path / "b.yuv", frames)
    out = io.StringIO()
    sequence_mse(_settings(a, b), out)
    lines = out.getvalue().splitlines()
    assert sum(line.startswith("#  Frame") for line in lines) == 2
    assert sum(not line.startswith("#") for line in lines) == 27


def test_sequence_mse_size_mismatch(tmp_path):
    a = _write(tmp_path / "a.yuv", _frames(2, 6))
    b = _write(tmp_path / "b.yuv", _frames(1, 6))
    with pytest.raises(YuvError, match="same size"):
        sequence_mse(_settings(a, b), io.StringIO())


def test_sequence_mse_not_multiple(tmp_path):
    a = tmp_path / "a.yuv"
    b = tmp_path / "b.yuv"
    a.write_bytes(b"\0" * (FRAME + 1))
    b.write_bytes(b"\0" * (FRAME + 1))
    with pytest.raises(YuvError, match="perfect multiple"):
        sequence_mse(_settings(str(a), str(b)), io.StringIO())


def test_sequence_mse_missing_file(tmp_path):
    a = _write(tmp_path / "a.yuv", _frames(1, 7))
    with pytest.raises(YuvError, match="not found"):
        sequence_mse(_settings(a, str(tmp_path / "missing.yuv")), io.StringIO())


def test_sequence_bestmatch_finds_shift(tmp_path):
    f = _frames(4, 8)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", [f[1], f[2], f[3], f[0]])
    out = io.StringIO()
    result = sequence_bestmatch(_settings(a, b, windowsize=3), out)
    assert len(result) == 4
    assert result[0] == (0, 0.0, 3)
    assert result[1] == (1, 0.0, 0)
    assert "best match for file1.frame 00000001, y mse was     0.00 file2.frame 00000000" in (
        out.getvalue()
    )


def test_sequence_bestmatch_skips_frames(tmp_path):
    f = _frames(4, 9)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", [f[1], f[2], f[3], f[0]])
    result = sequence_bestmatch(_settings(a, b, windowsize=2, skipframes=1), io.StringIO())
    assert [entry[0] for entry in result] == [1, 2, 3]
    assert result[0] == (1, 0.0, 0)


def test_sequence_dct_hashes_alignment(tmp_path):
    f = _frames(6, 10)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", f[2:])
    out = io.StringIO()
    match = sequence_dct_hashes(_settings(a, b), out)
    assert match == (4, 2, 0)
    text = out.getvalue()
    assert "# hash sequence matches: 4" in text
    assert "file 1 begins frame 00000002, file 2 begins frame 00000000" in text
    assert f"#   dd if={a} of={a}.trimmed bs={FRAME} skip=2" in text


def test_sequence_dct_hashes_already_aligned(tmp_path):
    f = _frames(3, 11)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", f)
    out = io.StringIO()
    match = sequence_dct_hashes(_settings(a, b), out)
    assert match == (3, 0, 0)
    assert "No trimming instructions necessary" in out.getvalue()


def test_sequence_dct_hashes_skip_offsets_positions(tmp_path):
    f = _frames(4, 12)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", f[1:])
    match = sequence_dct_hashes(_settings(a, b, skipframes=1), io.StringIO())
    assert match == (2, 2, 1)


def test_sequence_dct_hashes_window_limits_frames(tmp_path):
    f = _frames(5, 13)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", f)
    match = sequence_dct_hashes(_settings(a, b, windowsize=1), io.StringIO())
    assert match.length == 2


def test_sequence_dct_hashes_single_input(tmp_path):
    a = _write(tmp_path / "a.yuv", _frames(2, 14))
    out = io.StringIO()
    assert sequence_dct_hashes(_settings(a, mode=Mode.DCTHASH), out) is None
    assert "# hash sequence matches: 0" in out.getvalue()


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_main_unknown_option(capsys):
    assert main(["-3", "x.yuv"]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_main_user_dimensions(tmp_path, capsys):
    f = _frames(2, 15)
    a = _write(tmp_path / "a.yuv", f)
    b = _write(tmp_path / "b.yuv", f)
    assert main(["-1", a, "-2", b, "-W", str(W), "-H", str(H)]) == 0
    text = capsys.readouterr().out
    assert "# dimensions: 16 x 16 (user supplied)" in text
    assert f"# file0: {a}" in text
    assert "# windowsize: 30" in text
    assert "Exact Match" in text


def test_main_autodetects_dimensions(tmp_path, capsys):
    path = tmp_path / "sd.yuv"
    path.write_bytes(b"\0" * frame_size(720, 480))
    assert main(["-D", "-1", str(path)]) == 0
    text = capsys.readouterr().out
    assert "720x480p" in text
    assert "# dimensions: 720 x 480 (autodetected)" in text
    assert "# dcthashmatch: 1" in text


def test_main_missing_file(tmp_path, capsys):
    assert main(["-1", str(tmp_path / "missing.yuv")]) == 1
    assert "not found" in capsys.readouterr().err