"""
RasterSurface: the only place the pipeline touches OpenCV.

A surface is a writable RGBA buffer of fixed dimensions that a raster can be
drawn into (scaled or cropped), read back from, and JPEG-encoded. Surfaces are
context managers and drop their buffer on every exit path; using a released
surface raises SurfaceError.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from food_photo_prep.config import MAX_SURFACE_PIXELS
from food_photo_prep.errors import EncodeError, SurfaceError
from food_photo_prep.raster import Raster, Region

logger = logging.getLogger(__name__)


class RasterSurface:
    def __init__(self, width: int, height: int, max_pixels: int = MAX_SURFACE_PIXELS):
        if width <= 0 or height <= 0:
            raise SurfaceError(
                f"Invalid surface size {width}x{height}",
                details={"width": width, "height": height},
            )
        if width * height > max_pixels:
            raise SurfaceError(
                f"Surface {width}x{height} exceeds limit of {max_pixels} pixels",
                details={"width": width, "height": height, "max_pixels": max_pixels},
            )

        try:
            self._pixels: Optional[np.ndarray] = np.zeros((height, width, 4), dtype=np.uint8)
        except MemoryError as e:
            raise SurfaceError(f"Cannot allocate {width}x{height} surface") from e

        self.width = width
        self.height = height

    def __enter__(self) -> "RasterSurface":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._pixels is None

    def release(self) -> None:
        self._pixels = None

    def _buffer(self) -> np.ndarray:
        if self._pixels is None:
            raise SurfaceError("Surface used after release")
        return self._pixels

    # -----------------------------------
    # Drawing
    # -----------------------------------

    def draw_array(self, pixels: np.ndarray) -> None:
        """Copy an RGBA array of exactly the surface size into the buffer."""
        buf = self._buffer()
        if pixels.shape != buf.shape:
            raise SurfaceError(
                f"Cannot draw {pixels.shape} array onto {buf.shape} surface"
            )
        np.copyto(buf, pixels)

    def draw_scaled(self, raster: Raster) -> None:
        """Draw the whole raster stretched to the surface dimensions."""
        buf = self._buffer()
        if raster.size == (self.width, self.height):
            np.copyto(buf, raster.pixels)
            return

        downscale = self.width <= raster.width and self.height <= raster.height
        interpolation = cv2.INTER_AREA if downscale else cv2.INTER_LINEAR
        try:
            scaled = cv2.resize(
                raster.pixels,
                (self.width, self.height),
                interpolation=interpolation,
            )
        except cv2.error as e:
            raise SurfaceError(f"Resampling to {self.width}x{self.height} failed: {e}") from e
        np.copyto(buf, scaled)

    def draw_region(self, raster: Raster, region: Region) -> None:
        """Draw a Region of the raster at 1:1 scale."""
        if (region.w, region.h) != (self.width, self.height):
            raise SurfaceError(
                f"Region {region.w}x{region.h} does not match surface {self.width}x{self.height}"
            )
        if not region.fits(raster.width, raster.height):
            raise ValueError(f"{region} is outside {raster!r}")
        np.copyto(
            self._buffer(),
            raster.pixels[region.y : region.y + region.h, region.x : region.x + region.w],
        )

    # -----------------------------------
    # Read-back / encoding
    # -----------------------------------

    def read_pixels(self) -> Raster:
        return Raster(self._buffer().copy())

    def encode_jpeg(self, quality: int) -> bytes:
        """Encode the surface as JPEG, discarding alpha."""
        bgr = cv2.cvtColor(self._buffer(), cv2.COLOR_RGBA2BGR)
        try:
            ok, encoded = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
        except cv2.error as e:
            raise EncodeError(f"JPEG encoding failed at quality {quality}: {e}") from e
        if not ok:
            raise EncodeError(f"JPEG encoding failed at quality {quality}")
        return encoded.tobytes()


def crop_raster(raster: Raster, region: Region) -> Raster:
    """Return a new Raster holding only `region` of the input."""
    with RasterSurface(region.w, region.h) as surface:
        surface.draw_region(raster, region)
        return surface.read_pixels()


def scale_raster(raster: Raster, width: int, height: int) -> Raster:
    with RasterSurface(width, height) as surface:
        surface.draw_scaled(raster)
        return surface.read_pixels()
