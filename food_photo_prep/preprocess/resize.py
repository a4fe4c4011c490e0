import logging

from food_photo_prep.config import PREPROCESS_MAX_SIDE_PX
from food_photo_prep.raster import Raster, round_half_up
from food_photo_prep.surface import scale_raster

logger = logging.getLogger(__name__)


def target_size(width: int, height: int, max_side: int):
    """Return the (width, height) that fits `max_side` without upscaling."""
    longest = max(width, height)
    scale = max_side / longest if longest > max_side else 1.0
    return (
        max(1, round_half_up(width * scale)),
        max(1, round_half_up(height * scale)),
    )


def resize_raster(raster: Raster, max_side: int = PREPROCESS_MAX_SIDE_PX) -> Raster:
    """Downscale so the longer side is at most `max_side`, keep aspect ratio."""
    if max_side < 1:
        raise ValueError(f"max_side must be positive, got {max_side}")

    new_w, new_h = target_size(raster.width, raster.height, max_side)
    if (new_w, new_h) == raster.size:
        logger.info("Resize skipped: %sx%s already within %spx", raster.width, raster.height, max_side)
        return raster

    resized = scale_raster(raster, new_w, new_h)
    logger.info(
        "Resized %sx%s -> %sx%s (max_side=%s)",
        raster.width,
        raster.height,
        new_w,
        new_h,
        max_side,
    )
    return resized
