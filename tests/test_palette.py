import numpy as np
import pytest

from mandelview.palette import INSIDE_COLOR, color_for, colorize


def test_bounded_points_are_black():
    assert color_for(None) == INSIDE_COLOR == (0.0, 0.0, 0.0)
    rgb = colorize(np.array([np.nan, 0.0]))
    assert rgb[0].tolist() == [0.0, 0.0, 0.0]


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.0, (1.0, 0.0, 0.0)),
        (1.0 / 3.0, (0.0, 1.0, 0.0)),
        (0.5, (0.0, 1.0, 1.0)),
        (2.0 / 3.0, (0.0, 0.0, 1.0)),
    ],
)
def test_value_selects_hue(value, expected):
    assert color_for(value) == pytest.approx(expected, abs=1e-9)


def test_colorize_keeps_grid_shape():
    values = np.array([[0.1, np.nan, 0.5], [0.9, 0.2, np.nan]])
    rgb = colorize(values)
    assert rgb.shape == (2, 3, 3)
    assert np.all((rgb >= 0.0) & (rgb <= 1.0))
    assert rgb[1, 2].tolist() == [0.0, 0.0, 0.0]
