"""
Uniform border trimming.

Phone screenshots, scanned prints and re-shared photos often carry white,
black or flat-colour margins. We scan inward from each edge while a line is
(almost) entirely border-like and crop to what survives.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from food_photo_prep.raster import Raster, Region
from food_photo_prep.surface import crop_raster

logger = logging.getLogger(__name__)

NEAR_WHITE_MIN = 245  # all channels strictly above
NEAR_BLACK_MAX = 10  # all channels strictly below
FLAT_SPREAD_MAX = 5  # max channel - min channel
LINE_BORDER_RATIO = 0.95
STRIDE_DIVISOR = 200  # min(w, h) // this = sampling stride
KEEP_AREA_RATIO = 0.98
MARGIN_PX = 1


def border_like_mask(rgb: np.ndarray) -> np.ndarray:
    """Boolean mask of near-white, near-black or chromatically flat pixels."""
    lo = rgb.min(axis=-1)
    hi = rgb.max(axis=-1)
    near_white = lo > NEAR_WHITE_MIN
    near_black = hi < NEAR_BLACK_MAX
    flat = (hi.astype(np.int16) - lo.astype(np.int16)) <= FLAT_SPREAD_MAX
    return near_white | near_black | flat


def _first_false(flags: np.ndarray) -> int:
    """Index of the first False entry, len(flags) when all are True."""
    misses = np.flatnonzero(~flags)
    return int(misses[0]) if misses.size else len(flags)


def _scan_offsets(rgb: np.ndarray):
    height, width = rgb.shape[:2]
    stride = max(1, min(width, height) // STRIDE_DIVISOR)

    # Column test samples every `stride`-th row, row test every `stride`-th column.
    col_border = border_like_mask(rgb[::stride, :, :]).mean(axis=0) >= LINE_BORDER_RATIO
    row_border = border_like_mask(rgb[:, ::stride, :]).mean(axis=1) >= LINE_BORDER_RATIO

    left = _first_false(col_border)
    right = width - 1 - _first_false(col_border[::-1])
    top = _first_false(row_border)
    bottom = height - 1 - _first_false(row_border[::-1])
    return left, right, top, bottom


def find_trim_offsets(raster: Raster):
    """
    Return (left, right, top, bottom): the first and last non-border column
    and row indices (inclusive). left > right or top > bottom when every line
    is border-like.
    """
    return _scan_offsets(raster.rgb)


def _inset_bounds(rgb: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """
    Inclusive (x0, y0, x1, y1) of the interior after one scan, pulled in by
    MARGIN_PX on every side that had a border. None when nothing survives.
    """
    height, width = rgb.shape[:2]
    left, right, top, bottom = _scan_offsets(rgb)
    if left >= right or top >= bottom:
        return None

    x0 = left + MARGIN_PX if left > 0 else 0
    x1 = right - MARGIN_PX if right < width - 1 else right
    y0 = top + MARGIN_PX if top > 0 else 0
    y1 = bottom - MARGIN_PX if bottom < height - 1 else bottom
    if x0 > x1 or y0 > y1:
        return None
    return x0, y0, x1, y1


def trim_border(raster: Raster) -> Raster:
    """Crop away a uniform border; no-op when there is nothing worth trimming."""
    rgb = raster.rgb
    x0, y0, x1, y1 = 0, 0, raster.width - 1, raster.height - 1

    # The inset can uncover another border-like line (a thin frame around a
    # flat matte). Rescan the crop until no side has a border left.
    passes = 0
    while True:
        bounds = _inset_bounds(rgb[y0 : y1 + 1, x0 : x1 + 1])
        if bounds is None or bounds == (0, 0, x1 - x0, y1 - y0):
            break
        bx0, by0, bx1, by1 = bounds
        x0, y0, x1, y1 = x0 + bx0, y0 + by0, x0 + bx1, y0 + by1
        passes += 1

    if passes == 0:
        logger.info("Border trim skipped: no border found on %sx%s", raster.width, raster.height)
        return raster

    region = Region.from_bounds(x0, y0, x1, y1)

    if region.area > KEEP_AREA_RATIO * raster.area:
        logger.info(
            "Border trim skipped: negligible border (%sx%s of %sx%s)",
            region.w,
            region.h,
            raster.width,
            raster.height,
        )
        return raster

    logger.info(
        "Border trimmed: %sx%s -> %sx%s at (%s, %s) in %s pass(es)",
        raster.width,
        raster.height,
        region.w,
        region.h,
        region.x,
        region.y,
        passes,
    )
    return crop_raster(raster, region)
