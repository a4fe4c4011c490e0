import pytest

from food_photo_prep.preprocess.square_crop import crop_square, square_region
from food_photo_prep.raster import Raster, Region


def test_square_input_is_untouched(raster):
    r = raster(64, 64, (1, 2, 3))
    assert crop_square(r) is r


@pytest.mark.parametrize("size", [(300, 200), (200, 300), (901, 900), (1, 50), (640, 480)])
def test_output_side_is_shorter_input_side(raster, size):
    out = crop_square(raster(size[0], size[1], (1, 2, 3)))
    assert out.width == out.height == min(size)


def test_landscape_crop_is_centered(canvas):
    arr = canvas(300, 200, (0, 0, 0), block=(50, 0, 200, 200), block_color=(9, 9, 9))
    out = crop_square(Raster(arr))
    assert (out.rgb == 9).all()


def test_square_region_rounds_half_up():
    # 201 x 100: x = round(100.5 - 50) = 51
    assert square_region(201, 100) == Region(51, 0, 100, 100)
    assert square_region(100, 301) == Region(0, 101, 100, 100)
