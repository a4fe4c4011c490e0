"""Pytest configuration and fixtures: synthetic rasters and encoded photos."""

from typing import Callable, Optional, Tuple

import cv2
import numpy as np
import pytest

from food_photo_prep.raster import Raster

Color = Tuple[int, int, int]

DISH = (200, 60, 40)


def _canvas(width: int, height: int, color: Color) -> np.ndarray:
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, :, :3] = color
    arr[:, :, 3] = 255
    return arr


@pytest.fixture
def canvas() -> Callable[..., np.ndarray]:
    """
    Factory for RGBA arrays: a solid field with an optional filled block.

    Usage:
        arr = canvas(300, 200, TABLE, block=(100, 60, 100, 80), block_color=DISH)
    """

    def make(
        width: int,
        height: int,
        color: Color,
        block: Optional[Tuple[int, int, int, int]] = None,
        block_color: Color = DISH,
    ) -> np.ndarray:
        arr = _canvas(width, height, color)
        if block is not None:
            x, y, w, h = block
            arr[y : y + h, x : x + w, :3] = block_color
        return arr

    return make


@pytest.fixture
def raster(canvas) -> Callable[..., Raster]:
    """Same as `canvas` but wrapped in a Raster."""

    def make(*args, **kwargs) -> Raster:
        return Raster(canvas(*args, **kwargs))

    return make


@pytest.fixture
def to_png() -> Callable[[np.ndarray], bytes]:
    """Encode an RGBA array as PNG bytes."""

    def encode(arr: np.ndarray) -> bytes:
        ok, buf = cv2.imencode(".png", cv2.cvtColor(arr, cv2.COLOR_RGBA2BGRA))
        assert ok
        return buf.tobytes()

    return encode


@pytest.fixture
def noise() -> Callable[[int, int], np.ndarray]:
    """Deterministic high-entropy RGBA array (compresses badly as JPEG)."""

    def make(width: int, height: int, seed: int = 7) -> np.ndarray:
        rng = np.random.default_rng(seed)
        arr = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        arr[:, :, 3] = 255
        return arr

    return make


def decode_jpeg(data: bytes) -> np.ndarray:
    """Decode JPEG bytes back to an RGB array."""
    bgr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert bgr is not None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


@pytest.fixture
def jpeg_pixels() -> Callable[[bytes], np.ndarray]:
    return decode_jpeg
