import numpy as np
import pytest

from mandelview.arithmetic import Complex
from mandelview.mapper import axis_coordinates, pixel_to_complex, to_complex_coordinate, to_pixel_coordinate


@pytest.mark.parametrize("extent", [1.0, 4.0, 7.5, 500.0, 1920.0])
def test_endpoints_at_identity_scale(extent):
    assert to_complex_coordinate(0, extent, 0.0, 1.0) == -2.0
    assert to_complex_coordinate(extent, extent, 0.0, 1.0) == 2.0


def test_magnification_shrinks_the_window():
    assert to_complex_coordinate(500, 500, 0.0, 2.0) == 0.0
    assert to_complex_coordinate(500, 500, 0.0, 4.0) == -1.0


def test_pan_offset_is_added_before_scaling():
    assert to_complex_coordinate(0, 100, 50.0, 1.0) == 0.0
    assert to_complex_coordinate(0, 100, -50.0, 1.0) == -4.0
    assert to_complex_coordinate(10, 100, 90.0, 2.0) == 0.0


def test_to_pixel_coordinate_inverts_mapping():
    for pixel in (0.0, 17.0, 250.0, 499.0):
        value = to_complex_coordinate(pixel, 500, 123.25, 8.0)
        assert to_pixel_coordinate(value, 500, 123.25, 8.0) == pytest.approx(pixel)


def test_pixel_to_complex_uses_each_axis_extent():
    assert pixel_to_complex(0, 0, 4, 4, (0.0, 0.0), 1.0) == Complex(-2.0, -2.0)
    assert pixel_to_complex(2, 2, 4, 4, (0.0, 0.0), 1.0) == Complex(0.0, 0.0)
    assert pixel_to_complex(100, 25, 200, 100, (0.0, 0.0), 1.0) == Complex(0.0, -1.0)


def test_axis_coordinates_match_scalar_mapping():
    values = axis_coordinates(3, 11, 37, 4.5, 3.0)
    expected = [to_complex_coordinate(p, 37, 4.5, 3.0) for p in range(3, 11)]
    assert values.dtype == np.float64
    assert values.tolist() == expected
