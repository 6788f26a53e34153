"""Small dense linear-algebra helpers: Gauss-Jordan inversion, linear solves, integer powers."""

from __future__ import annotations

import numpy as np

__all__ = [
    "swap_rows",
    "scale_row",
    "add_rows",
    "invert_matrix",
    "solve_linear_system",
    "pow_int",
]


def swap_rows(matrix: np.ndarray, row1: int, row2: int) -> None:
    """Swap two rows of ``matrix`` in place."""
    matrix[[row1, row2]] = matrix[[row2, row1]]


def scale_row(matrix: np.ndarray, row: int, factor: float) -> None:
    """Multiply one row of ``matrix`` by ``factor`` in place."""
    matrix[row] *= factor


def add_rows(matrix: np.ndarray, src_row: int, dest_row: int, factor: float) -> None:
    """Add ``factor`` times row ``src_row`` to row ``dest_row`` in place."""
    matrix[dest_row] += matrix[src_row] * factor


def _square(matrix, name: str) -> np.ndarray:
    array = np.array(matrix, dtype=float)
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise ValueError(f"{name} must be a square matrix, got shape {array.shape}")
    return array


def invert_matrix(matrix) -> np.ndarray:
    """Return the inverse of a square matrix by Gauss-Jordan elimination without pivoting.

    Raises ``numpy.linalg.LinAlgError`` when a zero diagonal pivot is met.
    """
    work = _square(matrix, "matrix")
    n = work.shape[0]
    identity = np.eye(n)

    for i in range(n):
        pivot = work[i, i]
        if pivot == 0:
            raise np.linalg.LinAlgError(
                f"zero pivot in row {i}: matrix cannot be inverted without pivoting"
            )
        scale_row(work, i, 1.0 / pivot)
        scale_row(identity, i, 1.0 / pivot)
        for j in range(n):
            if j != i:
                factor = -work[j, i]
                add_rows(work, i, j, factor)
                add_rows(identity, i, j, factor)

    return identity


def solve_linear_system(a, b) -> np.ndarray:
    """Solve ``a @ x = b`` by Gaussian elimination with partial pivoting.

    Raises ``numpy.linalg.LinAlgError`` when the matrix is singular.
    """
    work = _square(a, "a")
    rhs = np.array(b, dtype=float).reshape(-1)
    n = work.shape[0]
    if rhs.shape[0] != n:
        raise ValueError(f"b has length {rhs.shape[0]}, expected {n}")

    for i in range(n):
        pivot_row = i + int(np.argmax(np.abs(work[i:, i])))
        if pivot_row != i:
            swap_rows(work, i, pivot_row)
            rhs[[i, pivot_row]] = rhs[[pivot_row, i]]

        if work[i, i] == 0.0:
            raise np.linalg.LinAlgError("matrix is singular")

        pivot = work[i, i]
        work[i, i:] /= pivot
        rhs[i] /= pivot

        for j in range(n):
            if j != i:
                factor = work[j, i]
                work[j, i:] -= factor * work[i, i:]
                rhs[j] -= factor * rhs[i]

    return rhs


def pow_int(base, exponent: int):
    """Raise ``base`` to an integer power by repeated squaring."""
    if exponent == 0:
        return 1
    if exponent == 1:
        return base

    result = 1
    negative = exponent < 0
    exponent = abs(exponent)
    while exponent > 0:
        if exponent & 1:
            result *= base
        base *= base
        exponent >>= 1

    return 1.0 / result if negative else result