"""Derived per-point fields for micro-state output: symmetric parts, von Mises maps, IPF colours."""

from __future__ import annotations

import math

import numpy as np

from crystalfft.vonmises import vm, vm_stress

__all__ = ["symmetrize", "vm_field", "ipf_color", "ipf_colors"]

_KINDS = {0: "stress", 1: "strain", "stress": "stress", "strain": "strain"}

# Sample direction whose crystal-frame image is coloured.
_REFERENCE_DIRECTION = (0.0, 0.0, 1.0)


def _tensor_field(field, name: str) -> np.ndarray:
    array = np.asarray(field, dtype=float)
    if array.ndim != 5 or array.shape[:2] != (3, 3):
        raise ValueError(f"{name} must have shape (3, 3, n1, n2, n3), got {array.shape}")
    return array


def symmetrize(field) -> np.ndarray:
    """Return the symmetric part of a tensor field of shape ``(3, 3, n1, n2, n3)``."""
    array = _tensor_field(field, "field")
    return 0.5 * (array + array.swapaxes(0, 1))


def _resolve_kind(kind) -> str:
    try:
        return _KINDS[kind]
    except (KeyError, TypeError):
        raise ValueError(
            f"kind must be 0 or 'stress', or 1 or 'strain'; got {kind!r}"
        ) from None


def vm_field(field, kind) -> np.ndarray:
    """Return the von Mises measure at every point of a tensor field.

    ``kind`` selects the measure: ``0`` or ``"stress"`` for equivalent stress,
    ``1`` or ``"strain"`` for equivalent strain. The result has shape
    ``(n1, n2, n3)``.
    """
    measure = vm_stress if _resolve_kind(kind) == "stress" else vm
    array = _tensor_field(field, "field")
    result = np.empty(array.shape[2:])
    for index in np.ndindex(*result.shape):
        result[index] = measure(array[(slice(None), slice(None)) + index])
    return result


def _crystal_direction(phi1: float, phi: float, phi2: float) -> list[float]:
    """Rotate the reference direction into the crystal frame of Bunge angles (radians)."""
    norm = math.sqrt(sum(h * h for h in _REFERENCE_DIRECTION))
    hkl = [h / norm for h in _REFERENCE_DIRECTION]

    q = (
        math.sin(0.5 * phi) * math.cos(0.5 * (phi1 - phi2)),
        math.sin(0.5 * phi) * math.sin(0.5 * (phi1 - phi2)),
        math.cos(0.5 * phi) * math.sin(0.5 * (phi1 + phi2)),
        math.cos(0.5 * phi) * math.cos(0.5 * (phi1 + phi2)),
    )
    t1 = q[3] ** 2 - q[0] ** 2 - q[1] ** 2 - q[2] ** 2
    q_dot_h = sum(qi * hi for qi, hi in zip(q[:3], hkl))

    out = []
    for ii in range(3):
        value = t1 * hkl[ii] + 2.0 * q[ii] * q_dot_h
        for jj in range(3):
            if jj == ii:
                continue
            kk = 3 - ii - jj
            kl = jj - ii
            if kl == 2:
                kl = -1
            elif kl == -2:
                kl = 1
            value += 2.0 * q[kk] * q[3] * float(kl) * hkl[jj]
        out.append(value)
    return out


def ipf_color(phi1, phi, phi2) -> tuple[int, int, int]:
    """Return the inverse-pole-figure RGB colour (0-255) for Bunge Euler angles in radians.

    The colour is that of the sample z axis seen in the crystal frame, with
    red at [001], green at [011] and blue at [111].
    """
    dout = [abs(v) for v in _crystal_direction(float(phi1), float(phi), float(phi2))]

    dmax = 0.0
    dmin = 9999.0
    top = bottom = middle = 0
    for jj, value in enumerate(dout):
        if dmax < value:
            dmax = value
            top = jj
        if dmin > value:
            dmin = value
            bottom = jj
    for jj in range(3):
        if jj != bottom and jj != top:
            middle = jj

    dout[top] = min(dout[top], 1.0)
    angle = min(math.pi / 4.0, math.acos(dout[top]))
    theta = math.atan2(dout[bottom], dout[middle])

    red = 1.0 - math.sin(1.6 * angle)
    green = (1.0 - red) * math.cos(2.0 * theta)
    blue = (1.0 - red) * math.sin(2.0 * theta)

    correct = 1.0 / max(red, green, blue)
    return tuple(int(255.0 * c * correct) for c in (red, green, blue))  # type: ignore[return-value]


def ipf_colors(eulers) -> np.ndarray:
    """Return IPF colours for a field of Euler angles.

    ``eulers`` has shape ``(3, ...)`` holding ``phi1, phi, phi2`` in radians;
    the result has the same shape with ``uint8`` red, green and blue.
    """
    angles = np.asarray(eulers, dtype=float)
    if angles.ndim < 1 or angles.shape[0] != 3:
        raise ValueError(f"eulers must have shape (3, ...), got {angles.shape}")
    colors = np.zeros(angles.shape, dtype=np.uint8)
    for index in np.ndindex(*angles.shape[1:]):
        point = (slice(None),) + index
        colors[point] = ipf_color(*angles[point])
    return colors