import numpy as np
import pytest
from PIL import Image

from framekit.picvmaf import (
    VmafMeasurement,
    annotate_chart,
    main,
    read_vmaf_csv,
    render_chart,
)


def _write(tmp_path, text):
    path = tmp_path / "vmaf.csv"
    path.write_text(text)
    return path


def test_read_skips_comment_lines(tmp_path):
    path = _write(tmp_path, "# header\n;note\n skipped\n0,95.5,90.0\n1,80.25,90.0\n")
    assert read_vmaf_csv(path) == [
        VmafMeasurement(95.5, 90.0),
        VmafMeasurement(80.25, 90.0),
    ]


def test_read_stops_at_unparsable_line_but_counts_frames(tmp_path):
    path = _write(tmp_path, "0,1,2\nbad\n3,4,5\n")
    result = read_vmaf_csv(path)
    assert len(result) == 3
    assert result[0] == VmafMeasurement(1.0, 2.0)
    assert result[1:] == [VmafMeasurement(), VmafMeasurement()]


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        read_vmaf_csv(tmp_path / "absent.csv")


def test_render_chart_output_size():
    chart = render_chart([VmafMeasurement(50.0, 50.0)] * 10, 0)
    assert chart.shape == (1080, 1920, 3)
    assert chart.dtype == np.uint8


def test_render_chart_full_scores_are_green_and_cursor_red():
    chart = render_chart([VmafMeasurement(100.0, 100.0)] * 20, 0)
    assert tuple(chart[540, 1919]) == (0, 128, 0)
    assert tuple(chart[540, 0]) == (250, 0, 0)


def test_render_chart_zero_score_leaves_column_black():
    measurements = [VmafMeasurement(100.0, 0.0)] * 10 + [VmafMeasurement(0.0, 0.0)] * 10
    chart = render_chart(measurements, 0)
    assert tuple(chart[540, 1919]) == (0, 0, 0)


def test_render_chart_half_score_fills_lower_half():
    chart = render_chart([VmafMeasurement(50.0, 50.0)] * 10, 0)
    assert tuple(chart[1070, 1919]) == (0, 128, 0)
    assert tuple(chart[10, 1919]) == (0, 0, 0)


def test_render_chart_empty_raises():
    with pytest.raises(ValueError):
        render_chart([], 0)


def test_annotate_chart_draws_text_in_place():
    image = np.zeros((1080, 1920, 3), dtype=np.uint8)
    result = annotate_chart(image, "out.png", VmafMeasurement(95.0, 90.0))
    assert result is image
    assert image[760:900, 30:600].any()
    assert not image[:700].any()


def test_main_without_arguments_fails():
    assert main([]) == 1


def test_main_requires_output(tmp_path):
    path = _write(tmp_path, "0,1,2\n")
    assert main(["-i", str(path)]) == 1


def test_main_rejects_cursor_out_of_range(tmp_path):
    path = _write(tmp_path, "0,90,90\n1,91,90\n")
    out = tmp_path / "chart.png"
    assert main(["-i", str(path), "-o", str(out), "-c", "5"]) == 1
    assert not out.exists()


def test_main_writes_chart(tmp_path):
    path = _write(tmp_path, "0,90,92\n1,95,92\n2,91,92\n")
    out = tmp_path / "chart.png"
    assert main(["-i", str(path), "-o", str(out), "-c", "1"]) == 0
    with Image.open(out) as img:
        assert img.size == (1920, 1080)