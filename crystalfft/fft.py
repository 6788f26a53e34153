"""Three-dimensional discrete Fourier transforms on a regular grid.

The real-to-complex transform halves the first grid axis: a real box of
shape ``(n1, n2, n3)`` maps to a complex box of shape ``(n1 // 2 + 1, n2, n3)``.
"""

from __future__ import annotations

import numpy as np

__all__ = ["RealFFT3D", "ComplexFFT3D"]

# The last axis listed is the one numpy halves in a real transform.
_R2C_AXES = (1, 2, 0)
_ALL_AXES = (0, 1, 2)


def _shape3(shape) -> tuple[int, int, int]:
    dims = tuple(int(n) for n in shape)
    if len(dims) != 3 or any(n < 1 for n in dims):
        raise ValueError(f"expected three positive grid sizes, got {tuple(shape)}")
    return dims  # type: ignore[return-value]


def _check_shape(array: np.ndarray, expected: tuple[int, ...], what: str) -> None:
    if array.shape != expected:
        raise ValueError(f"{what} has shape {array.shape}, expected {expected}")


class RealFFT3D:
    """Forward real-to-complex and backward complex-to-real 3-D transforms.

    With ``scale`` true the backward transform divides by the number of grid
    points, so that ``backward(forward(x))`` returns ``x``; otherwise it is
    left unscaled and returns ``x`` multiplied by the number of points.
    """

    def __init__(self, shape, scale=True):
        self.real_shape = _shape3(shape)
        n1, n2, n3 = self.real_shape
        self.complex_shape = (n1 // 2 + 1, n2, n3)
        self.scale = bool(scale)

    @property
    def size(self) -> int:
        """Number of points of the real grid."""
        n1, n2, n3 = self.real_shape
        return n1 * n2 * n3

    def forward(self, data) -> np.ndarray:
        """Return the half spectrum of a real field of shape ``real_shape``."""
        array = np.asarray(data, dtype=float)
        _check_shape(array, self.real_shape, "real input")
        return np.fft.rfftn(array, axes=_R2C_AXES)

    def backward(self, spectrum) -> np.ndarray:
        """Return the real field whose half spectrum of shape ``complex_shape`` is given."""
        array = np.asarray(spectrum, dtype=complex)
        _check_shape(array, self.complex_shape, "complex input")
        n1, n2, n3 = self.real_shape
        norm = "backward" if self.scale else "forward"
        return np.fft.irfftn(array, s=(n2, n3, n1), axes=_R2C_AXES, norm=norm)


class ComplexFFT3D:
    """Full complex 3-D transforms; the backward transform is fully scaled."""

    def __init__(self, shape):
        self.shape = _shape3(shape)

    def forward(self, data) -> np.ndarray:
        """Return the full spectrum of a real or complex field."""
        array = np.asarray(data)
        _check_shape(array, self.shape, "input")
        return np.fft.fftn(array, axes=_ALL_AXES)

    def backward(self, spectrum) -> np.ndarray:
        """Return the complex field whose full spectrum is given."""
        array = np.asarray(spectrum, dtype=complex)
        _check_shape(array, self.shape, "spectrum")
        return np.fft.ifftn(array, axes=_ALL_AXES)