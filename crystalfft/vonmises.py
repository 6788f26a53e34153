"""Von Mises equivalent measures of second-order tensors."""

from __future__ import annotations

import math

import numpy as np

__all__ = ["vm", "vm_stress"]


def _as_3x3(tensor) -> np.ndarray:
    array = np.asarray(tensor, dtype=float)
    if array.size != 9:
        raise ValueError(f"expected a 3x3 tensor, got {array.size} values")
    return array.reshape(3, 3)


def vm(tensor) -> float:
    """Return the von Mises equivalent strain of a 3x3 tensor."""
    t = _as_3x3(tensor)
    first_invariant = float(np.diagonal(t).sum())
    deviator = 0.5 * (t + t.T) - np.eye(3) * first_invariant / 3.0
    return math.sqrt(2.0 / 3.0 * float(np.sum(deviator**2)))


def vm_stress(stress) -> float:
    """Return the von Mises equivalent stress of a 3x3 stress tensor."""
    s = _as_3x3(stress)
    normal = (
        (s[0, 0] - s[1, 1]) ** 2
        + (s[1, 1] - s[2, 2]) ** 2
        + (s[2, 2] - s[0, 0]) ** 2
    )
    shear = s[0, 1] ** 2 + s[1, 2] ** 2 + s[0, 2] ** 2
    return math.sqrt((normal + 6.0 * shear) / 2.0)