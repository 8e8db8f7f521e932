"""Compose up to four pictures into a 2x2 multiview grid."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import numpy as np

from .canvas import TITLE_COLOR, TITLE_ORIGIN, ImageLoadError, load_image, put_title, save_png

RENDER_TITLE_DEFAULT = 1
MAX_INPUTS = 4

USAGE = f"""\
A tool to create a 2x2 multiview grid from four seperate pictures.
If a specific image is not required, skip it, black will be composited.
Usage:
  -1 topleft.png
  -2 topright.png
  -3 bottomleft.png
  -4 bottomright.png
  -v raise verbosity
  -t render filenames into images [def: {RENDER_TITLE_DEFAULT}]
  -o output.png"""


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _build_parser() -> _Parser:
    parser = _Parser(add_help=False, prog="pic2x2")
    for slot in range(1, MAX_INPUTS + 1):
        parser.add_argument(f"-{slot}", dest=f"input{slot}")
    parser.add_argument("-o", dest="output")
    parser.add_argument("-t", dest="render_title", type=int, default=RENDER_TITLE_DEFAULT)
    parser.add_argument("-v", dest="verbose", action="count", default=0)
    return parser


def compose_grid(images: Sequence[Optional[np.ndarray]]) -> np.ndarray:
    """Place images top-left, top-right, bottom-left, bottom-right on a black grid.

    Each cell is as large as the largest input; ``None`` leaves a cell black.
    """
    if len(images) > MAX_INPUTS:
        raise ValueError(f"at most {MAX_INPUTS} images fit in the grid, got {len(images)}")
    present = [img for img in images if img is not None]
    max_rows = max((img.shape[0] for img in present), default=0)
    max_cols = max((img.shape[1] for img in present), default=0)
    grid = np.zeros((max_rows * 2, max_cols * 2, 3), dtype=np.uint8)
    for slot, img in enumerate(images):
        if img is None:
            continue
        top = (slot // 2) * max_rows
        left = (slot % 2) * max_cols
        rows, cols = img.shape[:2]
        grid[top:top + rows, left:left + cols] = img
    return grid


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

    paths = [getattr(args, f"input{slot}") for slot in range(1, MAX_INPUTS + 1)]
    if all(path is None for path in paths):
        print("No input images given", file=sys.stderr)
        print(USAGE)
        return 1
    if args.output is None:
        print("An output file (-o) is required", file=sys.stderr)
        return 1

    images: list = []
    for path in paths:
        if path is None:
            images.append(None)
            continue
        try:
            img = load_image(path)
        except ImageLoadError as exc:
            print(exc)
            print("Failed to load image", file=sys.stderr)
            return 1
        if args.render_title:
            put_title(img, path, TITLE_ORIGIN, TITLE_COLOR)
        if args.verbose:
            print(f"{path} resolution is {img.shape[1]}x{img.shape[0]}")
        images.append(img)

    grid = compose_grid(images)
    if args.verbose:
        print(f"Output resolution is {grid.shape[1]}x{grid.shape[0]}")
    save_png(args.output, grid)
    return 0


if __name__ == "__main__":
    sys.exit(main())