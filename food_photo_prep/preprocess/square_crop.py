import logging

from food_photo_prep.raster import Raster, Region, round_half_up
from food_photo_prep.surface import crop_raster

logger = logging.getLogger(__name__)


def square_region(width: int, height: int) -> Region:
    """Centered square of side min(width, height)."""
    size = min(width, height)
    x = max(0, round_half_up(width / 2 - size / 2))
    y = max(0, round_half_up(height / 2 - size / 2))
    return Region(x, y, size, size)


def crop_square(raster: Raster) -> Raster:
    if raster.width == raster.height:
        return raster

    region = square_region(raster.width, raster.height)
    logger.info(
        "Square crop: %sx%s -> %sx%s at (%s, %s)",
        raster.width,
        raster.height,
        region.w,
        region.h,
        region.x,
        region.y,
    )
    return crop_raster(raster, region)
