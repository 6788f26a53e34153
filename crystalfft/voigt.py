"""Conversions between 6x6 Voigt matrices and 3x3x3x3 fourth-order tensors."""

from __future__ import annotations

import numpy as np

__all__ = [
    "VOIGT_PAIRS",
    "to_fourth_order",
    "to_second_order",
    "to_fourth_order_scaled",
    "to_fourth_order_antisymmetric",
]

VOIGT_PAIRS = ((0, 0), (1, 1), (2, 2), (1, 2), (0, 2), (0, 1))


def _as_6x6(c2) -> np.ndarray:
    array = np.asarray(c2, dtype=float)
    if array.shape != (6, 6):
        raise ValueError(f"expected a 6x6 matrix, got shape {array.shape}")
    return array


def _fill_symmetric(c2: np.ndarray) -> np.ndarray:
    c4 = np.zeros((3, 3, 3, 3))
    for i, (i1, i2) in enumerate(VOIGT_PAIRS):
        for j, (j1, j2) in enumerate(VOIGT_PAIRS):
            value = c2[i, j]
            c4[i1, i2, j1, j2] = value
            c4[i2, i1, j1, j2] = value
            c4[i1, i2, j2, j1] = value
            c4[i2, i1, j2, j1] = value
    return c4


def to_fourth_order(c2) -> np.ndarray:
    """Expand a 6x6 Voigt matrix into a tensor with minor symmetries."""
    return _fill_symmetric(_as_6x6(c2))


def to_second_order(c4) -> np.ndarray:
    """Contract a 3x3x3x3 tensor into a 6x6 Voigt matrix."""
    tensor = np.asarray(c4, dtype=float)
    if tensor.shape != (3, 3, 3, 3):
        raise ValueError(f"expected a 3x3x3x3 tensor, got shape {tensor.shape}")
    c2 = np.empty((6, 6))
    for i, (i1, i2) in enumerate(VOIGT_PAIRS):
        for j, (j1, j2) in enumerate(VOIGT_PAIRS):
            c2[i, j] = tensor[i1, i2, j1, j2]
    return c2


def to_fourth_order_scaled(c2) -> np.ndarray:
    """Expand a 6x6 Voigt matrix, halving each shear row and each shear column."""
    matrix = _as_6x6(c2)
    factor = np.ones(6)
    factor[3:] = 0.5
    return _fill_symmetric(matrix * np.outer(factor, factor))


def to_fourth_order_antisymmetric(c2) -> np.ndarray:
    """Expand a 6x6 matrix, antisymmetric in the first index pair from the third row on."""
    matrix = _as_6x6(c2)
    c4 = np.zeros((3, 3, 3, 3))
    for i, (i1, i2) in enumerate(VOIGT_PAIRS):
        sign = 1.0 if i < 2 else -1.0
        for j, (j1, j2) in enumerate(VOIGT_PAIRS):
            value = matrix[i, j]
            # assignment order matters when i1 == i2: the later write wins
            c4[i1, i2, j1, j2] = value
            c4[i2, i1, j1, j2] = sign * value
            c4[i1, i2, j2, j1] = value
            c4[i2, i1, j2, j1] = sign * value
    return c4