"""Per-frame quality statistics for planar YUV 4:2:0 video."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import fft, ndimage

HASH_SIZE = 32
HASH_BLOCK = 8
HASH_MATCH_DISTANCE = 2
_MASK64 = (1 << 64) - 1

FrameBuffer = Union[bytes, bytearray, memoryview, np.ndarray]


@dataclass(frozen=True)
class FrameFormat:
    """A well-known picture size."""

    width: int
    height: int
    label: str

    @property
    def frame_size(self) -> int:
        """Bytes in one YUV 4:2:0 frame of this size."""
        return (self.width * self.height * 3) // 2


FORMATS: Tuple[FrameFormat, ...] = (
    FrameFormat(720, 480, "720x480p"),
    FrameFormat(720, 576, "720x576p"),
    FrameFormat(1280, 720, "1280x720p"),
    FrameFormat(1920, 1080, "1920x1080p"),
    FrameFormat(3840, 2160, "3840x2160p"),
)


@dataclass
class FrameStats:
    """Comparison results for one frame, or for a pair of frames."""

    y_mse: float = 0.0
    u_mse: float = 0.0
    v_mse: float = 0.0
    y_psnr: float = 0.0
    u_psnr: float = 0.0
    v_psnr: float = 0.0
    sharpness: Tuple[float, float] = (0.0, 0.0)
    hashes: Tuple[int, int] = (0, 0)


class Match(NamedTuple):
    """A run of matching hashes in two sequences."""

    length: int
    start_a: int
    start_b: int


def detect_frame_formats(file_size: int) -> List[FrameFormat]:
    """Formats whose frame size divides ``file_size`` exactly."""
    return [fmt for fmt in FORMATS if file_size % fmt.frame_size == 0]


def hamming_distance(a: int, b: int) -> int:
    """Number of differing bits between two 64-bit values."""
    return ((int(a) ^ int(b)) & _MASK64).bit_count()


def _area_weights(src: int, dst: int) -> np.ndarray:
    scale = src / dst
    starts = np.arange(dst, dtype=np.float64)[:, None] * scale
    ends = starts + scale
    cells = np.arange(src, dtype=np.float64)[None, :]
    overlap = np.minimum(ends, cells + 1.0) - np.maximum(starts, cells)
    return np.clip(overlap, 0.0, None) / scale


def resize_area(plane: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample a single-channel 8-bit plane by pixel-area averaging."""
    plane = np.asarray(plane)
    if plane.ndim != 2 or plane.size == 0:
        raise ValueError("expected a non-empty two-dimensional plane")
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid target size {width}x{height}")
    rows, cols = plane.shape
    result = _area_weights(rows, height) @ plane.astype(np.float64) @ _area_weights(cols, width).T
    return np.clip(np.rint(result), 0, 255).astype(np.uint8)


def dct_hash(plane: np.ndarray) -> int:
    """64-bit perceptual hash from the low-frequency DCT coefficients of a plane."""
    small = resize_area(plane, HASH_SIZE, HASH_SIZE).astype(np.float32)
    coefficients = fft.dctn(small, type=2, norm="ortho").astype(np.float32)
    values = coefficients[:HASH_BLOCK, :HASH_BLOCK].ravel()
    ordered = np.sort(values)
    half = values.size // 2
    median = np.float32((ordered[half - 1] + ordered[half]) / np.float32(2.0))
    top_bit = values.size - 1
    return sum(1 << (top_bit - bit) for bit, above in enumerate(values > median) if above)


_LAPLACIAN = np.array([[0.0, 1.0, 0.0], [1.0, -4.0, 1.0], [0.0, 1.0, 0.0]])


def sharpness(plane: np.ndarray) -> float:
    """Variance of the Laplacian; an RGB image is converted to gray first."""
    image = np.asarray(plane)
    if image.ndim == 3 and image.shape[2] == 3:
        gray = image.astype(np.float64) @ np.array([0.299, 0.587, 0.114])
        image = np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    laplacian = ndimage.convolve(image.astype(np.float64), _LAPLACIAN, mode="mirror")
    return float(np.var(laplacian))


def psnr(mse: float, max_value: float) -> float:
    """Peak signal-to-noise ratio in dB; infinite for a perfect match."""
    if mse == 0:
        return math.inf
    return 10.0 * math.log10((max_value * max_value) / mse)


def plane_mse(first: np.ndarray, second: np.ndarray) -> float:
    """Mean squared difference between two planes of the same shape and type."""
    if first.shape != second.shape or first.dtype != second.dtype:
        raise ValueError("Frame dimensions or types do not match.")
    diff = first.astype(np.float64) - second.astype(np.float64)
    return float(np.sum(diff * diff) / (first.shape[0] * first.shape[1]))


def split_planes(
    frame: FrameBuffer, width: int, height: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Views of the Y, U and V planes of one YUV 4:2:0 frame."""
    if isinstance(frame, np.ndarray):
        data = np.asarray(frame, dtype=np.uint8).ravel()
    else:
        data = np.frombuffer(frame, dtype=np.uint8)
    chroma_width, chroma_height = width // 2, height // 2
    luma = width * height
    chroma = chroma_width * chroma_height
    needed = luma + 2 * chroma
    if data.size < needed:
        raise ValueError(f"frame holds {data.size} bytes, {needed} needed for {width}x{height}")
    y = data[:luma].reshape(height, width)
    u = data[luma:luma + chroma].reshape(chroma_height, chroma_width)
    v = data[luma + chroma:needed].reshape(chroma_height, chroma_width)
    return y, u, v


def compute_frame_stats(
    frame: FrameBuffer, other: Optional[FrameBuffer], width: int, height: int
) -> FrameStats:
    """Sharpness and hash of ``frame``; with ``other``, also MSE and PSNR per plane."""
    y1, u1, v1 = split_planes(frame, width, height)
    stats = FrameStats()
    if other is None:
        stats.sharpness = (sharpness(y1), 0.0)
        stats.hashes = (dct_hash(y1), 0)
        return stats

    y2, u2, v2 = split_planes(other, width, height)
    stats.y_mse = plane_mse(y1, y2)
    stats.u_mse = plane_mse(u1, u2)
    stats.v_mse = plane_mse(v1, v2)
    stats.y_psnr = psnr(stats.y_mse, 255.0)
    stats.u_psnr = psnr(stats.u_mse, 255.0)
    stats.v_psnr = psnr(stats.v_mse, 255.0)
    stats.sharpness = (sharpness(y1), sharpness(y2))
    stats.hashes = (dct_hash(y1), dct_hash(y2))
    return stats


def find_longest_match(a: Sequence[int], b: Sequence[int]) -> Optional[Match]:
    """Longest diagonal run where hashes differ by at most two bits.

    Returns ``None`` when no pair of hashes matches.
    """
    best = Match(0, 0, 0)
    for offset in range(-len(a) + 1, len(b)):
        run = 0
        for i in range(max(0, -offset), min(len(a), len(b) - offset)):
            j = i + offset
            if hamming_distance(a[i], b[j]) <= HASH_MATCH_DISTANCE:
                run += 1
                if run > best.length:
                    best = Match(run, i - run + 1, j - run + 1)
            else:
                run = 0
    return best if best.length > 0 else None