from io import BytesIO

import cv2
import numpy as np
import pytest
from PIL import Image

from food_photo_prep.errors import DecodeError, SurfaceError
from food_photo_prep.preprocess.decode import decode_image


def test_decode_png_to_rgba(canvas, to_png):
    arr = canvas(40, 30, (10, 20, 30))
    data = to_png(arr)

    raster, original_size = decode_image(data)

    assert raster.size == (40, 30)
    assert original_size == len(data)
    assert tuple(raster.pixels[0, 0]) == (10, 20, 30, 255)


def test_declared_size_is_reported(canvas, to_png):
    _, original_size = decode_image(to_png(canvas(4, 4, (0, 0, 0))), declared_size=12345)
    assert original_size == 12345


def test_decode_grayscale_jpeg():
    buf = BytesIO()
    Image.new("L", (20, 10), color=128).save(buf, format="JPEG")

    raster, _ = decode_image(buf.getvalue())

    assert raster.size == (20, 10)
    r, g, b, a = (int(v) for v in raster.pixels[5, 5])
    assert r == g == b
    assert a == 255


def test_decode_applies_exif_orientation():
    img = Image.new("RGB", (60, 20), color=(0, 128, 255))
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW on display
    buf = BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())

    raster, _ = decode_image(buf.getvalue())

    assert raster.size == (20, 60)


@pytest.mark.parametrize("data", [b"", b"not an image at all", b"\x89PNG\r\n\x1a\n\x00\x00"])
def test_decode_rejects_garbage(data):
    with pytest.raises(DecodeError):
        decode_image(data)


def test_decode_rejects_truncated_jpeg(noise):
    buf = BytesIO()
    Image.fromarray(noise(64, 64)[:, :, :3]).save(buf, format="JPEG", quality=90)
    data = buf.getvalue()

    with pytest.raises(DecodeError):
        decode_image(data[: len(data) // 3])


def test_decode_raises_surface_error_when_too_large(canvas, to_png):
    with pytest.raises(SurfaceError):
        decode_image(to_png(canvas(50, 50, (0, 0, 0))), max_pixels=2000)


def test_decoded_raster_is_independent_copy(canvas, to_png):
    raster, _ = decode_image(to_png(canvas(8, 8, (1, 1, 1))))
    assert raster.pixels.flags.writeable is False
    assert raster.pixels.dtype == np.uint8


def test_decode_sixteen_bit_grey_png_scales_to_eight_bits():
    ok, buf = cv2.imencode(".png", np.full((20, 30), 40000, dtype=np.uint16))
    assert ok

    raster, _ = decode_image(buf.tobytes())

    assert raster.size == (30, 20)
    # 40000 / 65535 of full scale, not clipped to white.
    assert tuple(raster.pixels[10, 15]) == (156, 156, 156, 255)
