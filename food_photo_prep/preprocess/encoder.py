"""Adaptive JPEG encoding: lower quality step by step until under budget."""

import logging
from typing import Callable

from food_photo_prep.config import (
    JPEG_MAX_QUALITY,
    JPEG_MIN_QUALITY,
    JPEG_QUALITY_STEP,
    TARGET_MAX_BYTES,
)
from food_photo_prep.errors import EncodeError
from food_photo_prep.raster import EncodedImage, Raster
from food_photo_prep.surface import RasterSurface

logger = logging.getLogger(__name__)


def _validate(max_quality: int, min_quality: int, quality_step: int, target_max_bytes: int):
    if not 1 <= min_quality <= max_quality <= 100:
        raise ValueError(
            f"Expected 1 <= min_quality <= max_quality <= 100, "
            f"got min={min_quality}, max={max_quality}"
        )
    if quality_step <= 0:
        raise ValueError(f"quality_step must be positive, got {quality_step}")
    if target_max_bytes <= 0:
        raise ValueError(f"target_max_bytes must be positive, got {target_max_bytes}")


def search_quality(
    encode_fn: Callable[[int], bytes],
    max_quality: int = JPEG_MAX_QUALITY,
    min_quality: int = JPEG_MIN_QUALITY,
    quality_step: int = JPEG_QUALITY_STEP,
    target_max_bytes: int = TARGET_MAX_BYTES,
) -> EncodedImage:
    """
    Encode at max_quality, then keep lowering by quality_step (clamped at
    min_quality) while the result is over target_max_bytes.

    Returns the first encoding within budget, or the last successful one once
    the floor is reached. Compression is best-effort: the floor result may
    still be over budget.

    Raises:
        EncodeError: if encode_fn failed at every quality tried.
    """
    _validate(max_quality, min_quality, quality_step, target_max_bytes)

    quality = max_quality
    attempts = 0
    best = None
    last_error = None

    while True:
        attempts += 1
        try:
            data = encode_fn(quality)
        except EncodeError as e:
            logger.warning("Encoding failed at quality=%s: %s", quality, e)
            last_error = e
        else:
            best = EncodedImage(data=data, size=len(data), quality=quality, attempts=attempts)
            logger.debug("Encoded at quality=%s: %s bytes", quality, best.size)
            if best.size <= target_max_bytes:
                return best

        if quality <= min_quality:
            break
        quality = max(min_quality, quality - quality_step)

    if best is None:
        raise EncodeError(
            f"Encoder produced no output at any quality between {max_quality} and {min_quality}",
            details={"last_error": str(last_error) if last_error else None},
        )

    logger.info(
        "Quality floor reached: %s bytes at quality=%s (budget=%s)",
        best.size,
        best.quality,
        target_max_bytes,
    )
    return best._replace(attempts=attempts)


def encode_adaptive(
    raster: Raster,
    max_quality: int = JPEG_MAX_QUALITY,
    min_quality: int = JPEG_MIN_QUALITY,
    quality_step: int = JPEG_QUALITY_STEP,
    target_max_bytes: int = TARGET_MAX_BYTES,
) -> EncodedImage:
    """JPEG-encode a raster within target_max_bytes where the floor allows."""
    with RasterSurface(raster.width, raster.height) as surface:
        surface.draw_scaled(raster)
        encoded = search_quality(
            surface.encode_jpeg,
            max_quality=max_quality,
            min_quality=min_quality,
            quality_step=quality_step,
            target_max_bytes=target_max_bytes,
        )

    logger.info(
        "Encoded %sx%s as JPEG: %s bytes at quality=%s after %s attempt(s)",
        raster.width,
        raster.height,
        encoded.size,
        encoded.quality,
        encoded.attempts,
    )
    return encoded
