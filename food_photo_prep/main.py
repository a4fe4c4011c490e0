"""FastAPI preview service: returns exactly the bytes a client will upload for recognition."""

import asyncio
import logging
import sys
import time

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from food_photo_prep.config import LOG_LEVEL
from food_photo_prep.errors import PreprocessError
from food_photo_prep.image_preprocess import preprocess_image

logging.basicConfig(
    level=LOG_LEVEL,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Original-Size",
        "X-Processed-Size",
        "X-Jpeg-Quality",
        "X-Output-Resolution",
    ],
)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/preprocess")
async def preprocess_photo(image: UploadFile = File(None)):
    """
    Run the preprocessing pipeline on an uploaded photo.

    Responds with the processed JPEG and diagnostic headers:
    X-Original-Size, X-Processed-Size, X-Jpeg-Quality, X-Output-Resolution.
    """
    if not image:
        raise HTTPException(422, "Image field is required")

    if image.content_type and not image.content_type.startswith("image/"):
        raise HTTPException(422, f"Unsupported content type: {image.content_type}")

    total_start = time.time()
    content = await image.read()
    logger.info("[PREPROCESS] Received %s (%s bytes)", image.filename, len(content))

    try:
        result = await asyncio.to_thread(preprocess_image, content, len(content))
    except PreprocessError as e:
        logger.warning("[PREPROCESS] Rejected %s: %s", image.filename, e.message)
        raise HTTPException(e.status_code, e.message)

    resolution = result.timings["image_output_resolution"]
    logger.info(
        "[PREPROCESS] Done in %sms: %s -> %s bytes",
        round((time.time() - total_start) * 1000, 2),
        result.original_size,
        result.processed_size,
    )
    return Response(
        content=result.image.data,
        media_type="image/jpeg",
        headers={
            "X-Original-Size": str(result.original_size),
            "X-Processed-Size": str(result.processed_size),
            "X-Jpeg-Quality": str(result.image.quality),
            "X-Output-Resolution": f"{resolution['width']}x{resolution['height']}",
        },
    )
