"""Escape-time evaluation of a single point of the complex plane."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .arithmetic import Complex

MAX_ITERATIONS = 100
STABILITY_THRESHOLD = 2.0

# Non-zero seed so the origin is not trivially stable for one extra step.
SEED = Complex(0.01, 0.01)


@dataclass(frozen=True)
class EscapeParameters:
    """Iteration cap and divergence radius shared by every pixel of a frame."""

    max_iterations: int = MAX_ITERATIONS
    stability_threshold: float = STABILITY_THRESHOLD

    def __post_init__(self) -> None:
        validate_escape_parameters(self.max_iterations, self.stability_threshold)


def validate_escape_parameters(max_iterations: int, stability_threshold: float) -> None:
    if int(max_iterations) < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}.")
    if not np.isfinite(stability_threshold) or stability_threshold <= 0:
        raise ValueError(f"stability_threshold must be a positive number, got {stability_threshold}.")


def evaluate(c: Complex, max_iterations: int, stability_threshold: float) -> Optional[float]:
    """Iterate ``z <- z * z + c`` and report how quickly ``c`` escapes.

    Returns ``iterations / max_iterations`` (clamped to 1.0) when the orbit
    leaves the disc of radius ``stability_threshold``, or ``None`` when the cap
    is reached first and the point is presumed to belong to the set. The orbit
    is updated at most ``max_iterations + 1`` times.
    """

    return escape_time(c, EscapeParameters(int(max_iterations), float(stability_threshold)))


def escape_time(c: Complex, params: EscapeParameters) -> Optional[float]:
    """Same as :func:`evaluate` for parameters that were validated up front."""

    max_iterations = params.max_iterations
    threshold = params.stability_threshold
    z = SEED
    iterations = 0

    while abs(z) < threshold:
        if iterations > max_iterations:
            return None
        iterations += 1
        z = z * z + c

    return float(min(np.float64(iterations) / np.float64(max_iterations), np.float64(1.0)))


def is_bounded(result: Optional[float]) -> bool:
    return result is None
