"""Create an absolute-difference image from two pictures."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import numpy as np

from .canvas import TITLE_COLOR, TITLE_ORIGIN, ImageLoadError, load_image, put_title, save_png

RENDER_TITLE_DEFAULT = 1
NORMALIZE_LOW = 150
NORMALIZE_HIGH = 255

USAGE = f"""\
A tool to create compare absolute differences between two images, creating an output difference image.
Usage:
  -1 image1.png
  -2 image2.png
  -n normalize output diff to gray (default black)
  -v raise verbosity
  -t render filenames into images [def: {RENDER_TITLE_DEFAULT}]
  -o output.png"""


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _build_parser() -> _Parser:
    parser = _Parser(add_help=False, prog="picdiff")
    parser.add_argument("-1", dest="first")
    parser.add_argument("-2", dest="second")
    parser.add_argument("-n", dest="normalize", action="store_true")
    parser.add_argument("-o", dest="output")
    parser.add_argument("-t", dest="render_title", type=int, default=RENDER_TITLE_DEFAULT)
    parser.add_argument("-v", dest="verbose", action="count", default=0)
    return parser


def absolute_difference(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    """Per-element absolute difference of two 8-bit images of the same shape."""
    if first.shape != second.shape:
        raise ValueError(f"image shapes differ: {first.shape} vs {second.shape}")
    diff = np.abs(first.astype(np.int16) - second.astype(np.int16))
    return diff.astype(np.uint8)


def normalize_minmax(image: np.ndarray, low: float, high: float) -> np.ndarray:
    """Linearly rescale all values so the minimum maps to ``low`` and the maximum to ``high``.

    A constant image maps entirely to ``low``.
    """
    values = image.astype(np.float64)
    if values.size == 0:
        return image.astype(np.uint8)
    smin = values.min()
    smax = values.max()
    span = smax - smin
    scale = (high - low) / span if span > np.finfo(np.float64).eps else 0.0
    shift = low - smin * scale
    scaled = np.rint(values * scale + shift)
    return np.clip(scaled, 0, 255).astype(np.uint8)


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

    if args.first is None or args.second is None:
        print("Two input images (-1, -2) are required", file=sys.stderr)
        return 1
    if args.output is None:
        print("An output file (-o) is required", file=sys.stderr)
        return 1

    images = []
    for path in (args.first, args.second):
        try:
            img = load_image(path)
        except ImageLoadError as exc:
            print(exc)
            print("Failed to load image", file=sys.stderr)
            return 1
        if args.verbose:
            print(f"{path} resolution is {img.shape[1]}x{img.shape[0]}")
        images.append(img)

    try:
        diff = absolute_difference(images[0], images[1])
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    if args.verbose:
        print(f"Output resolution is {diff.shape[1]}x{diff.shape[0]}")

    result = normalize_minmax(diff, NORMALIZE_LOW, NORMALIZE_HIGH) if args.normalize else diff
    if args.render_title:
        put_title(result, args.output, TITLE_ORIGIN, TITLE_COLOR)
    save_png(args.output, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())