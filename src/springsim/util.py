# MIT License (see LICENSE)
"""
Utility functions for vector math and display-size helpers.

Vectors are numpy arrays of shape (2,). The radius helpers reproduce the
sprite sizing of the editor: a mass has an integer "display" radius derived
from its mass, and walls see it with the radius of the sphere sprite drawn
for it.
"""
from __future__ import annotations
import math

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Allows tuple/list inputs for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(math.hypot(a[0] - b[0], a[1] - b[1]))


def mass_radius(m: float) -> int:
    """
    Display radius of a mass, ``int(2 ln(4m + 1))`` clamped to [1, 64].
    """
    rad = int(2 * math.log(4.0 * m + 1.0))
    return max(1, min(64, rad))


def sphere_size(rad: int) -> int:
    """Index (0-4) of the sphere sprite used to draw a mass of radius ``rad``."""
    rad = (25 + 2 * rad) // 2
    if rad < 15:
        rad = 15
    size = 0
    if rad * 2 >= 30:
        size = (rad * 2 - 30) // 10
    return min(size, 4)


def sphere_radius(size: int) -> int:
    """Radius in screen units of the sphere sprite ``size``."""
    return (size * 10 + 30) // 2


def screen_radius(radius: int) -> int:
    """Radius a mass occupies on screen; used for wall clearance and picking."""
    return sphere_radius(sphere_size(radius))
