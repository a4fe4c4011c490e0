"""Photo preprocessing pipeline run before food recognition upload.

Stages, always in this order:
- decode (Pillow, EXIF-aware)
- resize to PREPROCESS_MAX_SIDE_PX on the longer side (never upscales)
- uniform border trim (ENABLE_BORDER_TRIM)
- 2-means background crop (ENABLE_BACKGROUND_CROP)
- centered square crop (ENABLE_SQUARE_CROP)
- adaptive JPEG encode under TARGET_MAX_BYTES

Every crop stage degrades to a no-op when its heuristic does not apply. Only
decode/surface/encode failures are raised; no fallback image is substituted.
Per-stage latency and resolution are reported in the timings dict.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from food_photo_prep.config import (
    ENABLE_BACKGROUND_CROP,
    ENABLE_BORDER_TRIM,
    ENABLE_SQUARE_CROP,
    JPEG_MAX_QUALITY,
    JPEG_MIN_QUALITY,
    JPEG_QUALITY_STEP,
    PREPROCESS_MAX_SIDE_PX,
    TARGET_MAX_BYTES,
)
from food_photo_prep.errors import PreprocessError
from food_photo_prep.preprocess.background import crop_background
from food_photo_prep.preprocess.border_trim import trim_border
from food_photo_prep.preprocess.decode import decode_image
from food_photo_prep.preprocess.encoder import encode_adaptive
from food_photo_prep.preprocess.resize import resize_raster
from food_photo_prep.preprocess.square_crop import crop_square
from food_photo_prep.raster import PreprocessResult, Raster

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _resolution(raster: Raster) -> Dict[str, int]:
    return {"width": raster.width, "height": raster.height}


def _run_stage(
    name: str,
    timing_key: str,
    stage: Callable[[Raster], Raster],
    enabled: bool,
    raster: Raster,
    timings: Dict[str, Any],
) -> Raster:
    """Run one raster -> raster stage, recording its latency and whether it changed anything."""
    if not enabled:
        timings[timing_key] = 0.0
        logger.info("Stage %s disabled via config", name)
        return raster

    t = time.perf_counter()
    out = stage(raster)
    timings[timing_key] = _elapsed_ms(t)
    if out is not raster:
        timings["stages_applied"].append(name)
    return out


def preprocess_image(
    data: bytes,
    declared_size: Optional[int] = None,
    *,
    max_side: int = PREPROCESS_MAX_SIDE_PX,
    enable_border_trim: bool = ENABLE_BORDER_TRIM,
    enable_background_crop: bool = ENABLE_BACKGROUND_CROP,
    enable_square_crop: bool = ENABLE_SQUARE_CROP,
    max_quality: int = JPEG_MAX_QUALITY,
    min_quality: int = JPEG_MIN_QUALITY,
    quality_step: int = JPEG_QUALITY_STEP,
    target_max_bytes: int = TARGET_MAX_BYTES,
) -> PreprocessResult:
    """
    Full preprocessing pipeline.

    Returns:
        PreprocessResult(image, original_size, processed_size, timings)
    Timings dict includes:
        - decode_ms, resize_ms, trim_ms, background_ms, square_ms, encode_ms
        - total_ms
        - image_input_resolution / image_output_resolution
        - stages_applied (stages that changed the image)
        - jpeg_quality, encode_attempts
        - original_size, processed_size

    Raises:
        DecodeError, SurfaceError, EncodeError
    """
    total_start = time.perf_counter()
    timings: Dict[str, Any] = {"stages_applied": []}
    stage = "decode"

    logger.info(
        "Starting preprocessing (bytes=%s, max_side=%s, trim=%s, background=%s, "
        "square=%s, quality=%s..%s step %s, budget=%s)",
        len(data) if data else 0,
        max_side,
        enable_border_trim,
        enable_background_crop,
        enable_square_crop,
        max_quality,
        min_quality,
        quality_step,
        target_max_bytes,
    )

    try:
        t = time.perf_counter()
        raster, original_size = decode_image(data, declared_size)
        timings["decode_ms"] = _elapsed_ms(t)
        timings["image_input_resolution"] = _resolution(raster)

        stage = "resize"
        raster = _run_stage(
            stage, "resize_ms", lambda r: resize_raster(r, max_side), True, raster, timings
        )

        stage = "border_trim"
        raster = _run_stage(
            stage, "trim_ms", trim_border, enable_border_trim, raster, timings
        )

        stage = "background_crop"
        raster = _run_stage(
            stage, "background_ms", crop_background, enable_background_crop, raster, timings
        )

        stage = "square_crop"
        raster = _run_stage(
            stage, "square_ms", crop_square, enable_square_crop, raster, timings
        )
        timings["image_output_resolution"] = _resolution(raster)

        stage = "encode"
        t = time.perf_counter()
        encoded = encode_adaptive(
            raster,
            max_quality=max_quality,
            min_quality=min_quality,
            quality_step=quality_step,
            target_max_bytes=target_max_bytes,
        )
        timings["encode_ms"] = _elapsed_ms(t)
    except PreprocessError as e:
        logger.error("Preprocessing failed at stage=%s: %s", stage, e.message)
        raise

    timings["jpeg_quality"] = encoded.quality
    timings["encode_attempts"] = encoded.attempts
    timings["original_size"] = original_size
    timings["processed_size"] = encoded.size
    timings["total_ms"] = _elapsed_ms(total_start)

    logger.info(
        "Preprocessing completed: %s -> %s, %s -> %s bytes, quality=%s, "
        "stages_applied=%s, total=%sms",
        timings["image_input_resolution"],
        timings["image_output_resolution"],
        original_size,
        encoded.size,
        encoded.quality,
        timings["stages_applied"],
        timings["total_ms"],
    )
    return PreprocessResult(
        image=encoded,
        original_size=original_size,
        processed_size=encoded.size,
        timings=timings,
    )
