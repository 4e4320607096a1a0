"""Fixed hue mapping from escape values to RGB colours."""

from __future__ import annotations

from typing import Optional

import numpy as np
from matplotlib.colors import hsv_to_rgb

INSIDE_COLOR = (0.0, 0.0, 0.0)


def colorize(values: np.ndarray) -> np.ndarray:
    """Convert escape values in ``[0, 1]`` to RGB triples.

    The value selects the hue (a full turn of the colour wheel over the
    range) at full saturation and brightness. ``NaN`` marks bounded points,
    which are painted with :data:`INSIDE_COLOR`.
    """

    values = np.asarray(values, dtype=np.float64)
    inside = np.isnan(values)
    hue = np.clip(np.where(inside, 0.0, values), 0.0, 1.0)
    hsv = np.stack((hue, np.ones_like(hue), np.ones_like(hue)), axis=-1)
    rgb = hsv_to_rgb(hsv)
    for k in (0, 1, 2):
        rgb[..., k] = np.where(inside, INSIDE_COLOR[k], rgb[..., k])
    return rgb


def color_for(value: Optional[float]) -> tuple[float, float, float]:
    if value is None:
        return INSIDE_COLOR
    r, g, b = colorize(np.array([value], dtype=np.float64))[0]
    return float(r), float(g), float(b)
