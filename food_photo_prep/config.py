import os


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() == "true"


# -----------------------------------
# Pipeline stage configuration
# -----------------------------------

# PREPROCESS_MAX_SIDE_PX: cap on the longer side after the initial resize.
# Never upscales: smaller photos keep their original size.
PREPROCESS_MAX_SIDE_PX = int(os.getenv("PREPROCESS_MAX_SIDE_PX", "900"))

# ENABLE_BORDER_TRIM: strip uniform white/black/flat margins
ENABLE_BORDER_TRIM = _env_flag("ENABLE_BORDER_TRIM")

# ENABLE_BACKGROUND_CROP: 2-means background detection + crop to the dish
ENABLE_BACKGROUND_CROP = _env_flag("ENABLE_BACKGROUND_CROP")

# ENABLE_SQUARE_CROP: centered square crop on the shorter side
ENABLE_SQUARE_CROP = _env_flag("ENABLE_SQUARE_CROP")

# -----------------------------------
# JPEG encoder configuration
# -----------------------------------

# JPEG_MAX_QUALITY: first quality tried (1-100 scale)
JPEG_MAX_QUALITY = int(os.getenv("JPEG_MAX_QUALITY", "80"))

# JPEG_MIN_QUALITY: floor; the floor encoding is returned even when over budget
JPEG_MIN_QUALITY = int(os.getenv("JPEG_MIN_QUALITY", "50"))

# JPEG_QUALITY_STEP: quality decrement between attempts
JPEG_QUALITY_STEP = int(os.getenv("JPEG_QUALITY_STEP", "5"))

# TARGET_MAX_BYTES: byte budget for the final upload (default 150 KB)
TARGET_MAX_BYTES = int(os.getenv("TARGET_MAX_BYTES", str(150 * 1024)))

# -----------------------------------
# Resources / service
# -----------------------------------

# MAX_SURFACE_PIXELS: largest pixel surface the pipeline will allocate
MAX_SURFACE_PIXELS = int(os.getenv("MAX_SURFACE_PIXELS", "100000000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
