"""
2-means background removal for single-dish photos.

Strategy:
- Sample pixels from a band along the image edges (table, plate rim, counter)
- Cluster the samples into two colours with k-means (k=2)
- The larger cluster is the background colour
- Crop to the bounding box of everything that differs from it

This is not object segmentation. It works for a dish roughly centred on a
plain surface and degrades to a no-op otherwise.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from food_photo_prep.raster import ColorCentroid, Raster, Region
from food_photo_prep.surface import crop_raster

logger = logging.getLogger(__name__)

EDGE_BAND_RATIO = 0.10
SAMPLE_STEP = 2  # even x/y coordinates only
MAX_SAMPLES = 2000
KMEANS_ITERATIONS = 6
BACKGROUND_DISTANCE_SQ = 35 * 35
CROP_MARGIN_RATIO = 0.015
KEEP_AREA_RATIO = 0.97


def sample_edge_band(raster: Raster, max_samples: int = MAX_SAMPLES) -> np.ndarray:
    """
    Collect up to `max_samples` RGB triples (float64, shape (n, 3)) from the
    outer EDGE_BAND_RATIO of each side, in row-major order.
    """
    w, h = raster.width, raster.height
    band_w = max(1, int(w * EDGE_BAND_RATIO))
    band_h = max(1, int(h * EDGE_BAND_RATIO))

    ys, xs = np.mgrid[0:h:SAMPLE_STEP, 0:w:SAMPLE_STEP]
    in_band = (xs < band_w) | (xs >= w - band_w) | (ys < band_h) | (ys >= h - band_h)

    samples = raster.rgb[ys[in_band], xs[in_band]].astype(np.float64)
    if len(samples) > max_samples:
        stride = -(-len(samples) // max_samples)
        samples = samples[::stride]
    return samples


def kmeans_two(
    samples: np.ndarray,
    iterations: int = KMEANS_ITERATIONS,
) -> Tuple[ColorCentroid, ColorCentroid, np.ndarray]:
    """
    Two-cluster k-means on RGB samples.

    Centroid A starts at samples[0], centroid B at samples[len // 2]. Ties in
    distance go to A; an empty cluster keeps its previous centroid.

    Returns:
        (centroid_a, centroid_b, labels) where labels[i] is True when sample i
        was assigned to B in the last iteration.
    """
    if len(samples) == 0:
        raise ValueError("kmeans_two needs at least one sample")

    a = samples[0].copy()
    b = samples[len(samples) // 2].copy()
    labels = np.zeros(len(samples), dtype=bool)

    for _ in range(iterations):
        dist_a = ((samples - a) ** 2).sum(axis=1)
        dist_b = ((samples - b) ** 2).sum(axis=1)
        labels = dist_b < dist_a

        if (~labels).any():
            a = samples[~labels].mean(axis=0)
        if labels.any():
            b = samples[labels].mean(axis=0)

    return ColorCentroid(*a.tolist()), ColorCentroid(*b.tolist()), labels


def background_color(samples: np.ndarray) -> ColorCentroid:
    """Centroid of the majority cluster; ties favour centroid A."""
    a, b, labels = kmeans_two(samples)
    count_b = int(labels.sum())
    count_a = len(labels) - count_b
    return a if count_a >= count_b else b


def foreground_bounds(raster: Raster, background: ColorCentroid) -> Optional[Tuple[int, int, int, int]]:
    """
    Bounding box (min_x, max_x, min_y, max_y) of pixels farther than
    BACKGROUND_DISTANCE_SQ from the background colour, or None if empty.
    """
    diff = raster.rgb.astype(np.float64) - background.as_array()
    foreground = (diff * diff).sum(axis=2) > BACKGROUND_DISTANCE_SQ

    cols = np.flatnonzero(foreground.any(axis=0))
    rows = np.flatnonzero(foreground.any(axis=1))
    if cols.size == 0:
        return None
    return int(cols[0]), int(cols[-1]), int(rows[0]), int(rows[-1])


def crop_background(raster: Raster) -> Raster:
    samples = sample_edge_band(raster)
    if len(samples) == 0:
        logger.info("Background crop skipped: no edge samples")
        return raster

    background = background_color(samples)
    bounds = foreground_bounds(raster, background)
    if bounds is None:
        logger.info("Background crop skipped: no foreground (background=%s)", background)
        return raster

    min_x, max_x, min_y, max_y = bounds
    if max_x <= min_x or max_y <= min_y:
        logger.info("Background crop skipped: degenerate foreground box %s", bounds)
        return raster

    margin = int(CROP_MARGIN_RATIO * min(raster.width, raster.height))
    region = Region.from_bounds(
        max(0, min_x - margin),
        max(0, min_y - margin),
        min(raster.width - 1, max_x + margin),
        min(raster.height - 1, max_y + margin),
    )

    if region.area > KEEP_AREA_RATIO * raster.area:
        logger.info(
            "Background crop skipped: subject fills %sx%s of %sx%s",
            region.w,
            region.h,
            raster.width,
            raster.height,
        )
        return raster

    logger.info(
        "Background cropped: %sx%s -> %sx%s at (%s, %s), background=(%.0f, %.0f, %.0f)",
        raster.width,
        raster.height,
        region.w,
        region.h,
        region.x,
        region.y,
        background.r,
        background.g,
        background.b,
    )
    return crop_raster(raster, region)
