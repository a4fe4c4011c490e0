"""Decoder: encoded image bytes -> RGBA Raster."""

import logging
import warnings
from io import BytesIO
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from food_photo_prep.config import MAX_SURFACE_PIXELS
from food_photo_prep.errors import DecodeError, SurfaceError
from food_photo_prep.raster import Raster
from food_photo_prep.surface import RasterSurface

logger = logging.getLogger(__name__)

# 16-bit greyscale (PNG, TIFF) decodes to one of these; convert() would clip
# rather than scale them to 8 bits.
WIDE_GREY_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")


def _to_rgba(img: Image.Image) -> Image.Image:
    if img.mode in WIDE_GREY_MODES:
        wide = np.asarray(img).astype(np.int64)
        img = Image.fromarray((np.clip(wide, 0, 65535) >> 8).astype(np.uint8))
    return img.convert("RGBA")


def decode_image(
    data: bytes,
    declared_size: Optional[int] = None,
    max_pixels: int = MAX_SURFACE_PIXELS,
) -> Tuple[Raster, int]:
    """
    Decode JPEG/PNG/WebP/... bytes into an upright RGBA Raster.

    Returns:
        (raster, original_size) where original_size is `declared_size` when
        given, otherwise len(data). It is only reported, never used for
        processing.
    """
    if not data:
        raise DecodeError("Empty image data")

    original_size = declared_size if declared_size is not None else len(data)

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                source_mode = img.mode
                if width * height > max_pixels:
                    raise SurfaceError(
                        f"Image {width}x{height} exceeds limit of {max_pixels} pixels",
                        details={"width": width, "height": height},
                    )
                img.load()
                upright = ImageOps.exif_transpose(img)
                rgba = _to_rgba(upright)
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
        raise SurfaceError(f"Image too large to decode: {e}") from e
    except MemoryError as e:
        raise SurfaceError("Out of memory while decoding image") from e
    except UnidentifiedImageError as e:
        raise DecodeError("Unsupported or unrecognized image format") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e

    width, height = rgba.size
    with RasterSurface(width, height, max_pixels=max_pixels) as surface:
        surface.draw_array(np.asarray(rgba, dtype=np.uint8))
        raster = surface.read_pixels()

    logger.info(
        "Decoded image: %sx%s, mode=%s, original_size=%s bytes",
        width,
        height,
        source_mode,
        original_size,
    )
    return raster, original_size
