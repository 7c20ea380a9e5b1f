"""Summed-area-table mean filter."""
import math

import numpy as np
import pytest

from graymap.models.errors import ContractError
from graymap.models.summed_area_table import SummedAreaTable
from graymap.services.blur_service import BlurService


def brute_force_blur(grid, dx, dy):
    """Clipped mean filter summing every window directly."""
    height, width = grid.shape
    out = np.zeros_like(grid)
    for y in range(height):
        for x in range(width):
            lo_x, hi_x = max(x - dx, 0), min(x + dx, width - 1)
            lo_y, hi_y = max(y - dy, 0), min(y + dy, height - 1)
            window = grid[lo_y:hi_y + 1, lo_x:hi_x + 1]
            out[y, x] = math.floor(int(window.sum()) / window.size + 0.5)
    return out


def test_zero_radius_is_identity(random_image):
    img = random_image(11, 7, seed=30)
    before = img.copy()
    BlurService.blur(img, 0, 0)
    assert img == before


def test_small_row(make_image):
    img = make_image([[0, 30, 60]])
    BlurService.blur(img, 1, 0)
    assert img.samples.tolist() == [15, 30, 45]


def test_rounds_half_up(make_image):
    img = make_image([[0, 1]])
    BlurService.blur(img, 1, 0)
    assert img.samples.tolist() == [1, 1]


@pytest.mark.parametrize("dx, dy", [(1, 1), (2, 0), (0, 3), (3, 2), (20, 20)])
def test_matches_brute_force(random_image, dx, dy):
    img = random_image(13, 9, maxval=200, seed=dx * 10 + dy)
    expected = brute_force_blur(img.grid.copy(), dx, dy)
    BlurService.blur(img, dx, dy)
    assert np.array_equal(img.grid, expected)


def test_uniform_image_stays_uniform(image_service):
    img = image_service.create_image(8, 6, 255)
    img.samples[:] = 77
    BlurService.blur(img, 2, 3)
    assert set(img.samples.tolist()) == {77}


@pytest.mark.parametrize("k", [1, 2, 4])
def test_corner_window_area_shrinks(image_service, k):
    img = image_service.create_image(k + 3, k + 2, 255)
    assert BlurService.window_area(img, 0, 0, k, k) == (k + 1) * (k + 1)


def test_window_area_inside_and_at_far_edge(image_service):
    img = image_service.create_image(5, 5, 255)
    assert BlurService.window_area(img, 2, 2, 2, 2) == 25
    assert BlurService.window_area(img, 4, 4, 1, 1) == 4
    assert BlurService.window_area(img, 4, 0, 0, 2) == 3


def test_corner_value_uses_clipped_area(make_image):
    img = make_image([[90, 0, 0],
                      [0, 0, 0],
                      [0, 0, 0]])
    BlurService.blur(img, 1, 1)
    # corner window is 2x2, centre window 3x3
    assert img.get_pixel(0, 0) == 23
    assert img.get_pixel(1, 1) == 10


def test_negative_radius_is_contract_error(make_image):
    with pytest.raises(ContractError):
        BlurService.blur(make_image([[1]]), -1, 0)
    with pytest.raises(ContractError):
        BlurService.blur(make_image([[1]]), 0, -1)


def test_reports_elapsed_time(random_image):
    elapsed = BlurService.blur(random_image(20, 20, seed=1), 2, 2)
    assert isinstance(elapsed, float)
    assert elapsed >= 0.0


def test_empty_image(image_service):
    img = image_service.create_image(0, 0, 255)
    assert BlurService.blur(img, 3, 3) >= 0.0


def test_summed_area_table_rect_sum():
    grid = np.arange(12, dtype=np.uint8).reshape(3, 4)
    sat = SummedAreaTable(grid)
    assert sat.rect_sum(0, 0, 3, 2) == int(grid.sum())
    assert sat.rect_sum(1, 1, 2, 2) == 5 + 6 + 9 + 10
    assert sat.rect_sum(3, 0, 3, 0) == 3


def test_summed_area_table_requires_2d():
    with pytest.raises(ValueError):
        SummedAreaTable(np.zeros(4, dtype=np.uint8))
