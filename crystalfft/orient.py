"""Crystal reorientation by a finite rotation built with the Rodrigues formula."""

from __future__ import annotations

import math

import numpy as np

__all__ = ["rotation_from_spin", "orient"]


def rotation_from_spin(c) -> np.ndarray:
    """Return the rotation matrix for the rotation increment held in the skew part of ``c``."""
    c = np.asarray(c, dtype=float).reshape(3, 3)
    v = np.array([c[2, 1], c[0, 2], c[1, 0]])
    snorm = math.sqrt(float(v @ v))
    half_tan = math.tan(snorm / 2.0)
    if snorm <= 1.0e-6:
        snorm = 1.0
    vbar = half_tan * v / snorm

    snorm = float(vbar @ vbar)
    th = np.array(
        [
            [0.0, -vbar[2], vbar[1]],
            [vbar[2], 0.0, -vbar[0]],
            [-vbar[1], vbar[0], 0.0],
        ]
    )
    return np.eye(3) + 2.0 * (th + th @ th) / (1.0 + snorm)


def orient(a, c) -> np.ndarray:
    """Return the orientation matrix ``a`` rotated by the increment ``c``."""
    a = np.asarray(a, dtype=float).reshape(3, 3)
    return rotation_from_spin(c) @ a