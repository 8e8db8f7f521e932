"""Compare two planar YUV 4:2:0 files: MSE/PSNR, sharpness and DCT-hash alignment."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from .framestats import (
    FrameFormat,
    FrameStats,
    Match,
    compute_frame_stats,
    dct_hash,
    detect_frame_formats,
    find_longest_match,
    hamming_distance,
    split_planes,
)

PathType = Union[str, "os.PathLike[str]"]

DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_WINDOW = 30
HEADER_EVERY = 26
INITIAL_LOW_MSE = 60000.0
NEAR_IDENTICAL_DISTANCE = 10

USAGE = """\
A tool to generate mse/psnr/sharpness/dct-hashes for a pair of YUV files, containing many frames.
The bestmatch mode tries to match YUV frames within a window of -w frames, and you can
elect to skip -s #frames on file1 to try and find a best match for misaligned YUV files.
The DCT hash match mode tries to match YUV frames within a window of -w frames
showing trimming instructions if avail.
Usage:
  -1 file1.yuv
  -2 file2.yuv
  -W width (pixels def: 1920)
  -H height (pixels def: 1080)
  -v raise verbosity
  -b run best match and try to find frame offsets for best mse match
    -w number of frames to process [def: 30] (bestmatch)
    -s number of frames from input 1 to skip (bestmatch)
  -D run DCT hashes and try to find frame offsets for best aligned match"""

_ROW_FORMAT = (
    "%08d, %8.2f, %8.2f, %8.2f, %8.2f, %8.2f, %8.2f"
    ", %8.2f, %8.2f, %x, %x, %7d, %20s"
)


class YuvError(Exception):
    """Raised when the input files cannot be compared."""


class Mode(Enum):
    """What the tool computes."""

    MSE = "mse"
    BESTMATCH = "bestmatch"
    DCTHASH = "dcthash"


class DimensionSource(Enum):
    """Where the frame dimensions came from."""

    USER = "user supplied"
    DEFAULTS = "defaults"
    DETECTED = "autodetected"


def frame_size(width: int, height: int) -> int:
    """Bytes in one YUV 4:2:0 frame."""
    if width <= 0 or height <= 0:
        raise YuvError(f"invalid frame dimensions {width}x{height}")
    return (width * height * 3) // 2


@dataclass
class Settings:
    """Options for a comparison run.

    ``windowsize`` counts frames after the skipped ones, as given on the command line.
    """

    first: Optional[str] = None
    second: Optional[str] = None
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    skipframes: int = 0
    windowsize: int = DEFAULT_WINDOW
    verbose: int = 0
    mode: Mode = Mode.MSE
    dimensions: DimensionSource = DimensionSource.DEFAULTS

    @property
    def frame_size(self) -> int:
        return frame_size(self.width, self.height)

    @property
    def window(self) -> int:
        """Last frame number considered, including skipped frames."""
        return self.windowsize + self.skipframes

    @property
    def skip(self) -> int:
        return max(self.skipframes, 0)


def iter_frames(path: PathType, size: int) -> Iterator[bytes]:
    """Yield whole frames of ``size`` bytes; a trailing partial frame is dropped."""
    if size <= 0:
        raise ValueError(f"invalid frame size {size}")
    with open(path, "rb") as fh:
        while True:
            chunk = fh.read(size)
            if len(chunk) != size:
                return
            yield chunk


def assess(distance: int) -> str:
    """Describe how alike two frames are from the Hamming distance of their hashes."""
    if distance == 0:
        return "Exact Match"
    if distance <= NEAR_IDENTICAL_DISTANCE:
        return "Near Identical"
    return "Different"


def _file_size(path: Optional[PathType], number: int) -> int:
    if path is None:
        raise YuvError(f"file input {number} not given, aborting")
    try:
        return os.stat(path).st_size
    except OSError as exc:
        raise YuvError(f"file input {number} not found, aborting") from exc


def _check_pair(settings: Settings) -> int:
    size = settings.frame_size
    first_size = _file_size(settings.first, 1)
    second_size = _file_size(settings.second, 2)
    if first_size != second_size:
        raise YuvError("file input 1 isn't the same size as input 2, aborting")
    if first_size % size:
        raise YuvError(f"file input 1 isn't a perfect multiple of frame_size {size}")
    return size


def _write_header(out: TextIO) -> None:
    print(
        "%8s %9s %9s %9s %9s %9s %9s %9s %27s %17s %8s %21s"
        % ("#  Frame", "MSE", "", "", "PSNR", "", "", "Sharp", "DCT Hash", "", "Hamming", "Hash"),
        file=out,
    )
    print(
        "%8s %9s %9s %9s %9s %9s %9s %9s %9s"
        % ("#     Nr", "Y", "U", "V", "Y", "U", "V", "f1", "f2")
        + "%18s %17s %8s %21s" % ("f1", "f2", "Dist", "Assessment"),
        file=out,
    )
    print(
        "#------> <---------------------------> <---------------------------> "
        "<-----------------> <---------------------------------------------------------------->",
        file=out,
    )


def sequence_mse(settings: Settings, out: Optional[TextIO] = None) -> List[FrameStats]:
    """Compare the two files frame by frame and print a table row per frame."""
    out = sys.stdout if out is None else out
    size = _check_pair(settings)
    results: List[FrameStats] = []
    pairs = zip(iter_frames(settings.first, size), iter_frames(settings.second, size))
    for nr, (b1, b2) in enumerate(pairs):
        if nr % HEADER_EVERY == 0:
            _write_header(out)
        stats = compute_frame_stats(b1, b2, settings.width, settings.height)
        distance = hamming_distance(*stats.hashes)
        print(
            _ROW_FORMAT
            % (
                nr,
                stats.y_mse, stats.u_mse, stats.v_mse,
                stats.y_psnr, stats.u_psnr, stats.v_psnr,
                stats.sharpness[0], stats.sharpness[1],
                stats.hashes[0], stats.hashes[1],
                distance, assess(distance),
            ),
            file=out,
        )
        results.append(stats)
    return results


def sequence_bestmatch(
    settings: Settings, out: Optional[TextIO] = None
) -> List[Tuple[int, float, int]]:
    """For each frame of file 1, find the file 2 frame in the window with the lowest luma MSE.

    Returns ``(file1_frame, lowest_mse, file2_frame)`` for every reported best match.
    """
    out = sys.stdout if out is None else out
    size = _check_pair(settings)
    window = settings.window
    matches: List[Tuple[int, float, int]] = []
    low_frame = 0
    for nr1, b1 in enumerate(iter_frames(settings.first, size)):
        if nr1 < settings.skipframes:
            continue
        low_mse = INITIAL_LOW_MSE
        for nr2, b2 in enumerate(iter_frames(settings.second, size)):
            stats = compute_frame_stats(b1, b2, settings.width, settings.height)
            if settings.verbose and stats.y_mse >= 0.0:
                print(
                    "frame %08d.%08d, mse Y %8.2f, U %8.2f, V %8.2f, "
                    "psnr(dB) Y %8.2f, U %8.2f, V %8.2f"
                    % (
                        nr1, nr2,
                        stats.y_mse, stats.u_mse, stats.v_mse,
                        stats.y_psnr, stats.u_psnr, stats.v_psnr,
                    ),
                    file=out,
                )
            if stats.y_mse < low_mse:
                low_mse = stats.y_mse
                low_frame = nr2
            if nr2 >= window:
                print(
                    "best match for file1.frame %08d, y mse was %8.2f file2.frame %08d"
                    % (nr1, low_mse, low_frame),
                    file=out,
                )
                matches.append((nr1, low_mse, low_frame))
                break
        if nr1 >= window:
            break
    return matches


def _sequence_hashes(path: str, number: int, settings: Settings, out: TextIO) -> List[int]:
    size = settings.frame_size
    if _file_size(path, number) % size:
        raise YuvError(f"file input {number} isn't a perfect multiple of frame_size {size}")
    hashes: List[int] = []
    for nr, frame in enumerate(iter_frames(path, size)):
        if nr < settings.skipframes:
            continue
        if nr > settings.window:
            break
        luma, _, _ = split_planes(frame, settings.width, settings.height)
        value = dct_hash(luma)
        hashes.append(value)
        if settings.verbose:
            print(f"frame {nr:08d}, hash {value:x}, {path}", file=out)
    return hashes


def sequence_dct_hashes(settings: Settings, out: Optional[TextIO] = None) -> Optional[Match]:
    """Hash every frame and find the longest aligned run of matching frames.

    Returns the match with frame positions in the files, or ``None``.
    """
    out = sys.stdout if out is None else out
    inputs = [
        (number, path)
        for number, path in ((1, settings.first), (2, settings.second))
        if path is not None
    ]
    hash_lists = [(path, _sequence_hashes(path, number, settings, out)) for number, path in inputs]

    if settings.verbose:
        for path, hashes in hash_lists:
            for index, value in enumerate(hashes):
                print(f"frame {index + settings.skip:08d}, hash {value:x}, {path}", file=out)

    match: Optional[Match] = None
    matches = 0
    if len(hash_lists) > 1:
        first_hashes = hash_lists[0][1]
        found = find_longest_match(first_hashes, hash_lists[1][1])
        if found is None:
            matches = -1
        else:
            matches = found.length
            if settings.verbose:
                run = first_hashes[found.start_a:found.start_a + found.length]
                print("Matching sequence: " + "".join(f"{value:x} " for value in run), file=out)
            match = Match(
                found.length, found.start_a + settings.skip, found.start_b + settings.skip
            )

    print(f"# hash sequence matches: {matches}", file=out)
    if match is not None:
        print(
            "# Frame sequence, file 1 begins frame %08d, file 2 begins frame %08d"
            % (match.start_a, match.start_b),
            file=out,
        )
        for path, position in ((settings.first, match.start_a), (settings.second, match.start_b)):
            if position > 0:
                print("# Trimming instructions:", file=out)
                print(
                    f"#   dd if={path} of={path}.trimmed bs={settings.frame_size} skip={position}",
                    file=out,
                )
        if match.start_a == 0 and match.start_b == 0:
            print("# No trimming instructions necessary, YUV is already aligned.", file=out)
    return match


def _detect_format(path: str, number: int, out: TextIO) -> Optional[FrameFormat]:
    size = _file_size(path, number)
    formats = detect_frame_formats(size)
    for fmt in formats:
        print(
            "# Detected possible %10s, with exactly %6d frames in %s"
            % (fmt.label, size // fmt.frame_size, path),
            file=out,
        )
    if len(formats) == 1:
        return formats[0]
    print("# Operator needs to provide width (-W) and height (-H) args", file=out)
    return None


def _print_settings(settings: Settings, out: TextIO) -> None:
    print(
        f"# dimensions: {settings.width} x {settings.height} ({settings.dimensions.value})",
        file=out,
    )
    for index, path in enumerate((settings.first, settings.second)):
        if path is not None:
            print(f"# file{index}: {path}", file=out)
    print(f"# windowsize: {settings.windowsize}", file=out)
    print(f"# skipframes: {settings.skipframes}", file=out)
    print(f"# bestmatch: {int(settings.mode is Mode.BESTMATCH)}", file=out)
    print(f"# verbose: {settings.verbose}", file=out)
    print(f"# dcthashmatch: {int(settings.mode is Mode.DCTHASH)}", file=out)


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _build_parser() -> _Parser:
    parser = _Parser(add_help=False, prog="yuvmse")
    parser.add_argument("-1", dest="first")
    parser.add_argument("-2", dest="second")
    parser.add_argument("-b", dest="mode", action="store_const", const=Mode.BESTMATCH)
    parser.add_argument("-D", dest="mode", action="store_const", const=Mode.DCTHASH)
    parser.add_argument("-s", dest="skipframes", type=int, default=0)
    parser.add_argument("-w", dest="windowsize", type=int, default=DEFAULT_WINDOW)
    parser.add_argument("-v", dest="verbose", action="count", default=0)
    parser.add_argument("-W", dest="width", type=int)
    parser.add_argument("-H", dest="height", type=int)
    return parser


_RUNNERS = {
    Mode.MSE: sequence_mse,
    Mode.BESTMATCH: sequence_bestmatch,
    Mode.DCTHASH: sequence_dct_hashes,
}


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

    out = sys.stdout
    settings = Settings(
        first=args.first,
        second=args.second,
        skipframes=args.skipframes,
        windowsize=args.windowsize,
        verbose=args.verbose,
        mode=args.mode or Mode.MSE,
    )
    user_dimensions = args.width is not None or args.height is not None
    if args.width is not None:
        settings.width = args.width
    if args.height is not None:
        settings.height = args.height
    if user_dimensions:
        settings.dimensions = DimensionSource.USER

    try:
        for number, path in ((1, settings.first), (2, settings.second)):
            if path is None:
                continue
            detected = _detect_format(path, number, out)
            if detected is not None and not user_dimensions:
                settings.width = detected.width
                settings.height = detected.height
                settings.dimensions = DimensionSource.DETECTED

        _print_settings(settings, out)
        _RUNNERS[settings.mode](settings, out)
    except (YuvError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())