"""In-memory image types shared by every pipeline stage."""

import math
from typing import NamedTuple, Tuple

import numpy as np


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


class Raster:
    """
    Immutable RGBA pixel buffer.

    `pixels` is a read-only uint8 array of shape (height, width, 4),
    row-major, so the flat buffer length is always width * height * 4.
    """

    __slots__ = ("pixels",)

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray):
            raise ValueError("Raster pixels must be a numpy array")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster pixels must be uint8, got {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster pixels must have shape (h, w, 4), got {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Raster must have positive width and height")

        pixels = np.ascontiguousarray(pixels)
        pixels.flags.writeable = False
        self.pixels = pixels

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def rgb(self) -> np.ndarray:
        """Read-only (h, w, 3) view without the alpha channel."""
        return self.pixels[:, :, :3]

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"


class Region(NamedTuple):
    """Axis-aligned box inside a Raster: x, y is the top-left corner."""

    x: int
    y: int
    w: int
    h: int

    @classmethod
    def from_bounds(cls, x0: int, y0: int, x1: int, y1: int) -> "Region":
        """Build from inclusive pixel bounds."""
        return cls(int(x0), int(y0), int(x1 - x0 + 1), int(y1 - y0 + 1))

    @property
    def area(self) -> int:
        return self.w * self.h

    def fits(self, width: int, height: int) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.w > 0
            and self.h > 0
            and self.x + self.w <= width
            and self.y + self.h <= height
        )


class ColorCentroid(NamedTuple):
    """Mean RGB colour of a pixel cluster."""

    r: float
    g: float
    b: float

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b], dtype=np.float64)


class EncodedImage(NamedTuple):
    """Final pipeline output: compressed bytes, handed over to the caller."""

    data: bytes
    size: int
    quality: int
    attempts: int = 1


class PreprocessResult(NamedTuple):
    image: EncodedImage
    original_size: int
    processed_size: int
    timings: dict
