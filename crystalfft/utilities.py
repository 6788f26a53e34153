"""Array reductions and debugging dumps of arrays to per-rank text files."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import numpy as np

__all__ = [
    "minval",
    "maxval",
    "sum_array",
    "rank_filename",
    "format_array",
    "print_array",
    "print_array_to_file",
    "write_values_to_file",
]


def minval(values: Iterable):
    """Return the smallest value; raises ``ValueError`` when empty."""
    return min(values)


def maxval(values: Iterable):
    """Return the largest value; raises ``ValueError`` when empty."""
    return max(values)


def sum_array(values: Iterable) -> float:
    """Return the sum of the values, starting from 0.0."""
    return sum(values, 0.0)


def rank_filename(my_rank: int, filename: str) -> str:
    """Return the per-rank name ``rank<my_rank>_<filename>``."""
    return f"rank{my_rank}_{filename}"


def _flat(values) -> list:
    return np.asarray(values).ravel().tolist()


def _scientific(value) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return f"{value:.4e}"


def format_array(values, dim0: int, dim1: int) -> str:
    """Format a row-major ``dim0`` x ``dim1`` array, one row per line."""
    flat = _flat(values)
    if len(flat) < dim0 * dim1:
        raise ValueError(f"need {dim0 * dim1} values, got {len(flat)}")
    lines = (
        "".join(f"  {_scientific(v)}" for v in flat[row * dim1 : (row + 1) * dim1])
        for row in range(dim0)
    )
    return "".join(f"{line}\n" for line in lines)


def print_array(values, dim0: int, dim1: int) -> None:
    """Print a row-major ``dim0`` x ``dim1`` array to standard output."""
    print(format_array(values, dim0, dim1), end="")


def print_array_to_file(values, dim0: int, dim1: int, my_rank: int, filename: str) -> Path:
    """Write a row-major array to ``rank<my_rank>_<filename>`` and return its path."""
    path = Path(rank_filename(my_rank, filename))
    path.write_text(format_array(values, dim0, dim1))
    return path


def write_values_to_file(values, my_rank: int, filename: str) -> Path:
    """Write one value per line to ``rank<my_rank>_<filename>`` and return its path.

    Integer arrays use a 13-wide field; anything else a 24-wide ``E`` format.
    """
    array = np.asarray(values).ravel()
    pattern = "%13d\n" if np.issubdtype(array.dtype, np.integer) else "%24.14E\n"
    path = Path(rank_filename(my_rank, filename))
    path.write_text("".join(pattern % v for v in array.tolist()))
    return path