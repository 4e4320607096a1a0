"""Conversions between screen pixels and the canonical [-2, 2] window."""

from __future__ import annotations

import numpy as np

from .arithmetic import Complex

WINDOW_MIN = -2.0
WINDOW_SPAN = 4.0


def to_complex_coordinate(
    pixel: float,
    axis_extent: float,
    pan_offset_component: float,
    magnification: float,
) -> np.float64:
    """Map one pixel coordinate to the matching complex-plane coordinate.

    Pixel ``0`` maps to ``-2`` and pixel ``axis_extent`` to ``+2`` at unit
    magnification without panning. The pan offset is added in pre-scaled
    pixel units before the division by ``magnification``.
    """

    translated = np.float64(pixel) + np.float64(pan_offset_component)
    scaled = translated / np.float64(axis_extent) / np.float64(magnification)
    return scaled * np.float64(WINDOW_SPAN) + np.float64(WINDOW_MIN)


def to_pixel_coordinate(
    value: float,
    axis_extent: float,
    pan_offset_component: float,
    magnification: float,
) -> np.float64:
    """Inverse of :func:`to_complex_coordinate`; the result may be fractional."""

    scaled = (np.float64(value) - np.float64(WINDOW_MIN)) / np.float64(WINDOW_SPAN)
    return scaled * np.float64(magnification) * np.float64(axis_extent) - np.float64(pan_offset_component)


def pixel_to_complex(
    x: float,
    y: float,
    width: float,
    height: float,
    pan_offset: tuple[float, float],
    magnification: float,
) -> Complex:
    real = to_complex_coordinate(x, width, pan_offset[0], magnification)
    imaginary = to_complex_coordinate(y, height, pan_offset[1], magnification)
    return Complex(float(real), float(imaginary))


def axis_coordinates(
    start: int,
    stop: int,
    axis_extent: float,
    pan_offset_component: float,
    magnification: float,
) -> np.ndarray:
    """Vectorised :func:`to_complex_coordinate` over ``range(start, stop)``."""

    pixels = np.arange(start, stop, dtype=np.float64)
    scaled = (pixels + np.float64(pan_offset_component)) / np.float64(axis_extent) / np.float64(magnification)
    return scaled * np.float64(WINDOW_SPAN) + np.float64(WINDOW_MIN)
