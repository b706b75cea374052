"""
Integrality helpers shared by the integer-programming drivers.
"""

import math
from typing import Sequence

import numpy as np

INTEGRALITY_TOLERANCE = 1e-6


def fractional_part(value: float, tolerance: float = INTEGRALITY_TOLERANCE) -> float:
    """
    Fractional part of value in [0, 1), snapped to 0 within tolerance of an integer.

    Snapping on both sides means 2.9999999 and 3.0000001 both yield 0.
    """
    frac = value - math.floor(value)
    if frac <= tolerance or frac >= 1.0 - tolerance:
        return 0.0
    return frac


def is_integral(x: Sequence[float], tolerance: float = INTEGRALITY_TOLERANCE) -> bool:
    return all(fractional_part(v, tolerance) == 0.0 for v in x)


def first_fractional_index(x: Sequence[float], tolerance: float = INTEGRALITY_TOLERANCE) -> int:
    """Lowest index with a fractional value, -1 if x is integral."""
    for i, v in enumerate(x):
        if fractional_part(v, tolerance) > 0.0:
            return i
    return -1


def most_fractional_index(x: Sequence[float], tolerance: float = INTEGRALITY_TOLERANCE) -> int:
    """
    Index whose fractional part is closest to 0.5, -1 if x is integral.

    Ties go to the lowest index.
    """
    best = -1
    best_distance = math.inf
    for i, v in enumerate(x):
        frac = fractional_part(v, tolerance)
        if frac == 0.0:
            continue
        distance = abs(frac - 0.5)
        if distance < best_distance - 1e-12:
            best_distance = distance
            best = i
    return best


def round_integral(x: Sequence[float]) -> np.ndarray:
    """Round an (almost) integral vector, mapping -0.0 to 0.0."""
    return np.round(np.asarray(x, dtype=float)) + 0.0


def unit_vector(size: int, index: int) -> np.ndarray:
    e = np.zeros(size)
    e[index] = 1.0
    return e
