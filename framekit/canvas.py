"""Image loading, titling and saving shared by the picture tools."""

from __future__ import annotations

from os import PathLike
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

PathType = Union[str, "PathLike[str]"]
Color = Tuple[int, int, int]

TITLE_ORIGIN = (10, 40)
TITLE_COLOR: Color = (255, 255, 255)


class ImageLoadError(Exception):
    """Raised when an image file cannot be read."""

    def __init__(self, path: PathType) -> None:
        super().__init__(f"Error reading file {path}, aborting.")
        self.path = path


def load_image(path: PathType) -> np.ndarray:
    """Read an image file as a height x width x 3 array of 8-bit RGB."""
    try:
        with Image.open(path) as img:
            rgb = img.convert("RGB")
    except (OSError, ValueError) as exc:
        raise ImageLoadError(path) from exc
    array = np.array(rgb, dtype=np.uint8)
    if array.shape[0] == 0:
        raise ImageLoadError(path)
    return array


def put_title(image: np.ndarray, text: str, origin: Tuple[int, int], color: Color) -> np.ndarray:
    """Draw ``text`` into ``image`` in place, with its baseline starting at ``origin``.

    Returns the same array for convenience.
    """
    pil = Image.fromarray(image, "RGB")
    draw = ImageDraw.Draw(pil)
    font = ImageFont.load_default()
    bottom = draw.textbbox((0, 0), text, font=font)[3]
    x, y = origin
    draw.text((x, y - bottom), text, fill=tuple(color), font=font)
    image[...] = np.asarray(pil)
    return image


def save_png(path: PathType, image: np.ndarray) -> None:
    """Write an RGB array to ``path`` as an uncompressed PNG."""
    Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8), "RGB").save(
        path, format="PNG", compress_level=0
    )