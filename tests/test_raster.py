import numpy as np
import pytest

from food_photo_prep.errors import SurfaceError
from food_photo_prep.raster import Raster, Region, round_half_up
from food_photo_prep.surface import RasterSurface, crop_raster


def test_raster_buffer_length_matches_dimensions(canvas):
    r = Raster(canvas(7, 5, (1, 2, 3)))
    assert r.size == (7, 5)
    assert r.pixels.size == 7 * 5 * 4


def test_raster_is_read_only(canvas):
    r = Raster(canvas(4, 4, (1, 2, 3)))
    with pytest.raises(ValueError):
        r.pixels[0, 0, 0] = 9


@pytest.mark.parametrize(
    "arr",
    [
        np.zeros((4, 4, 3), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.float32),
        np.zeros((0, 4, 4), dtype=np.uint8),
        np.zeros((4, 4), dtype=np.uint8),
    ],
)
def test_raster_rejects_bad_buffers(arr):
    with pytest.raises(ValueError):
        Raster(arr)


def test_region_from_inclusive_bounds():
    region = Region.from_bounds(10, 20, 19, 24)
    assert region == Region(10, 20, 10, 5)
    assert region.area == 50
    assert region.fits(20, 25)
    assert not region.fits(19, 25)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_crop_raster_copies_region(canvas):
    arr = canvas(10, 10, (0, 0, 0))
    arr[3, 4, :3] = (9, 8, 7)
    out = crop_raster(Raster(arr), Region(4, 3, 2, 2))
    assert out.size == (2, 2)
    assert tuple(out.pixels[0, 0, :3]) == (9, 8, 7)


def test_crop_raster_rejects_region_outside(canvas):
    with pytest.raises(ValueError):
        crop_raster(Raster(canvas(10, 10, (0, 0, 0))), Region(5, 5, 6, 2))


def test_surface_released_on_exit_even_on_error():
    surface = RasterSurface(4, 4)
    with pytest.raises(RuntimeError):
        with surface:
            raise RuntimeError("boom")
    assert surface.released
    with pytest.raises(SurfaceError):
        surface.read_pixels()


@pytest.mark.parametrize("size", [(0, 10), (10, -1)])
def test_surface_rejects_empty_size(size):
    with pytest.raises(SurfaceError):
        RasterSurface(*size)


def test_surface_respects_pixel_limit():
    with pytest.raises(SurfaceError):
        RasterSurface(100, 100, max_pixels=9999)


def test_surface_encode_jpeg(canvas):
    with RasterSurface(16, 16) as surface:
        surface.draw_array(canvas(16, 16, (10, 200, 30)))
        data = surface.encode_jpeg(80)
    assert data[:2] == b"\xff\xd8"
