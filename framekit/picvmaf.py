"""Render a VMAF score chart with a cursor on one frame measurement."""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass
from os import PathLike
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .canvas import TITLE_COLOR, put_title, save_png

RENDER_TITLE_DEFAULT = 1
CHART_ROWS = 100
OUTPUT_SIZE = (1920, 1080)
BAR_COLOR = (0, 128, 0)
CURSOR_COLOR = (250, 0, 0)
SCORE_COLOR = (250, 250, 150)
TITLE_POS = (40, 800)
SCORE_POS = (40, 840)
AGGREGATE_POS = (40, 880)
INITIAL_MIN_SCORE = 110.0

USAGE = f"""\
A tool to create a vmaf chart with a cursor position on a specific measurement.
The vmaf file has been processed and converted to a csv using
\tAGGREGATE=`cat vmaf.json | jq -r '.aggregate.VMAF_score'`
\tcat vmaf.json | jq -r '.frames[] | "\\(.frameNum),\\(.VMAF_score)"' | sed "s!\\$!,$AGGREGATE!g"
Usage:
  -i vmaf.csv
  -c framenumber to draw cursor at (0..max vmaf frame number)
  -o output.png
  -v raise verbosity
  -t render filenames into images [def: {RENDER_TITLE_DEFAULT}]"""

_FLOAT = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_LINE_RE = re.compile(rf"\s*[+-]?\d+,\s*({_FLOAT}),\s*({_FLOAT})")
_COMMENT_PREFIXES = (" ", ";", "#")


@dataclass(frozen=True)
class VmafMeasurement:
    """Score of one frame and the aggregate score of the whole sequence."""

    score: float = 0.0
    aggregate: float = 0.0


def read_vmaf_csv(path: Union[str, "PathLike[str]"]) -> List[VmafMeasurement]:
    """Read ``frame,score,aggregate`` lines.

    Lines beginning with a space, ``;`` or ``#`` are ignored. Every other line
    counts as a frame; parsing stops at the first line that does not match and
    the frames after it are left as zero measurements.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        data_lines = [
            line.rstrip("\n")
            for line in fh
            if not line.startswith(_COMMENT_PREFIXES)
        ]

    measurements: List[VmafMeasurement] = []
    for line in data_lines:
        match = _LINE_RE.match(line)
        if match is None:
            break
        measurements.append(VmafMeasurement(float(match.group(1)), float(match.group(2))))

    padding = len(data_lines) - len(measurements)
    measurements.extend(VmafMeasurement() for _ in range(padding))
    return measurements


def _linear_axis(src: int, dst: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    pos = (np.arange(dst, dtype=np.float64) + 0.5) * (src / dst) - 0.5
    lower = np.floor(pos).astype(np.int64)
    frac = pos - lower
    below = lower < 0
    lower[below] = 0
    frac[below] = 0.0
    above = lower >= src - 1
    lower[above] = src - 1
    frac[above] = 0.0
    upper = np.minimum(lower + 1, src - 1)
    return lower, upper, frac


def _resize_linear(image: np.ndarray, width: int, height: int) -> np.ndarray:
    rows, cols = image.shape[:2]
    y0, y1, fy = _linear_axis(rows, height)
    x0, x1, fx = _linear_axis(cols, width)
    values = image.astype(np.float64)
    vertical = values[y0] * (1.0 - fy)[:, None, None] + values[y1] * fy[:, None, None]
    result = vertical[:, x0] * (1.0 - fx)[None, :, None] + vertical[:, x1] * fx[None, :, None]
    return np.clip(np.rint(result), 0, 255).astype(np.uint8)


def render_chart(measurements: Sequence[VmafMeasurement], cursor_column: int) -> np.ndarray:
    """Draw one green bar per frame and a red cursor column, scaled to 1920x1080 RGB."""
    if not measurements:
        raise ValueError("no VMAF measurements to chart")
    chart = np.zeros((CHART_ROWS, len(measurements), 3), dtype=np.uint8)
    for column, measurement in enumerate(measurements):
        top = int(CHART_ROWS - measurement.score)
        top = min(max(top, 0), CHART_ROWS)
        chart[top:, column] = BAR_COLOR

    # A two pixel wide cursor spanning the full height.
    left = max(cursor_column - 1, 0)
    right = min(cursor_column + 1, len(measurements))
    if left < right:
        chart[:, left:right] = CURSOR_COLOR

    width, height = OUTPUT_SIZE
    return _resize_linear(chart, width, height)


def annotate_chart(image: np.ndarray, title: str, measurement: VmafMeasurement) -> np.ndarray:
    """Write the title and the cursor frame's scores into the chart in place."""
    put_title(image, title, TITLE_POS, TITLE_COLOR)
    put_title(image, f"VMAF_score: {measurement.score:5.2f}%", SCORE_POS, SCORE_COLOR)
    put_title(image, f"VMAF_average: {measurement.aggregate:5.2f}%", AGGREGATE_POS, SCORE_COLOR)
    return image


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _build_parser() -> _Parser:
    parser = _Parser(add_help=False, prog="picvmaf")
    parser.add_argument("-c", dest="cursor", type=int, default=0)
    parser.add_argument("-i", dest="input")
    parser.add_argument("-o", dest="output")
    parser.add_argument("-t", dest="render_title", type=int, default=RENDER_TITLE_DEFAULT)
    parser.add_argument("-v", dest="verbose", action="count", default=0)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(sys.argv[1:] if argv is None else argv)
    if not args_list:
        print(USAGE)
        return 1
    try:
        args = _build_parser().parse_args(args_list)
    except _UsageError as exc:
        print(exc, file=sys.stderr)
        print(USAGE)
        return 1

    if args.input is None or args.output is None:
        print("An input file (-i) and an output file (-o) are required", file=sys.stderr)
        return 1

    try:
        measurements = read_vmaf_csv(args.input)
    except OSError as exc:
        print(f"Unable to read {args.input}: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Found {len(measurements)} frames.")
        min_score = min([INITIAL_MIN_SCORE, *(m.score for m in measurements)])
        print(f"min_score {min_score:f}")

    if not measurements:
        print("No VMAF measurements found", file=sys.stderr)
        return 1
    if not 0 <= args.cursor < len(measurements):
        print(
            f"Cursor {args.cursor} is outside 0..{len(measurements) - 1}",
            file=sys.stderr,
        )
        return 1

    chart = render_chart(measurements, args.cursor)
    if args.render_title:
        annotate_chart(chart, args.output, measurements[args.cursor])
    save_png(args.output, chart)

    if args.verbose:
        print(f"Created {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())