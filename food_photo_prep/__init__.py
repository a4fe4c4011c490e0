"""
Food photo preprocessing:
- preprocess: pipeline stages (decode, resize, border trim, background crop,
  square crop, adaptive JPEG encode)
- image_preprocess: orchestrator with per-stage timings
- main: FastAPI preview service
"""

from food_photo_prep.errors import DecodeError, EncodeError, PreprocessError, SurfaceError
from food_photo_prep.image_preprocess import preprocess_image
from food_photo_prep.raster import EncodedImage, PreprocessResult, Raster, Region

__all__ = [
    "DecodeError",
    "EncodeError",
    "EncodedImage",
    "PreprocessError",
    "PreprocessResult",
    "Raster",
    "Region",
    "SurfaceError",
    "preprocess_image",
]
