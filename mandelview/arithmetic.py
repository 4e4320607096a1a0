"""Complex-number value type used by the escape-time evaluator."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    """An immutable complex number treated as a 2D vector."""

    real: float
    imaginary: float

    def __add__(self, other: Complex) -> Complex:
        return add(self, other)

    def __mul__(self, other: Complex) -> Complex:
        return multiply(self, other)

    def __abs__(self) -> float:
        return magnitude(self)


def add(a: Complex, b: Complex) -> Complex:
    return Complex(a.real + b.real, a.imaginary + b.imaginary)


def multiply(a: Complex, b: Complex) -> Complex:
    # (a + bi)(c + di) = (ac - bd) + (ad + bc)i
    return Complex(
        a.real * b.real - a.imaginary * b.imaginary,
        a.real * b.imaginary + a.imaginary * b.real,
    )


def magnitude(a: Complex) -> float:
    """Euclidean length of ``a``; NaN components propagate."""

    return math.sqrt(abs(a.real * a.real + a.imaginary * a.imaginary))
