"""Grid-wide operations on displacement-gradient fields and their spectra."""

from __future__ import annotations

import numpy as np

__all__ = ["initialize_disgrad", "inverse_the_greens"]


def _tensor_field(field, name: str) -> np.ndarray:
    array = np.asarray(field, dtype=float)
    if array.ndim != 5 or array.shape[:2] != (3, 3):
        raise ValueError(f"{name} must have shape (3, 3, n1, n2, n3), got {array.shape}")
    return array


def initialize_disgrad(disgrad, ddisgradmacro, work) -> np.ndarray:
    """Return ``disgrad`` plus the macroscopic increment plus the fluctuation ``work``."""
    disgrad = _tensor_field(disgrad, "disgrad")
    work = _tensor_field(work, "work")
    if work.shape != disgrad.shape:
        raise ValueError(f"work has shape {work.shape}, expected {disgrad.shape}")
    macro = np.asarray(ddisgradmacro, dtype=float).reshape(3, 3)
    return disgrad + macro[:, :, None, None, None] + work


def _nyquist(indices: np.ndarray, n: int) -> np.ndarray:
    return (indices == n // 2) & (n % 2 == 0)


def inverse_the_greens(work, workim, c0, s0, xk, yk, zk, global_shape, local_start):
    """Apply the Green operator of the reference medium to a polarization spectrum.

    ``work`` and ``workim`` hold the real and imaginary parts of the spectrum,
    each of shape ``(3, 3, m1, m2, m3)``; ``xk``, ``yk`` and ``zk`` are the
    wave-vector components along each local axis. ``global_shape`` is the real
    grid size and ``local_start`` the zero-based offset of the local box. At
    Nyquist frequencies of even-sized axes the operator is ``-s0``; the zero
    frequency is set to zero. Returns the new real and imaginary parts.
    """
    work = _tensor_field(work, "work")
    workim = _tensor_field(workim, "workim")
    if workim.shape != work.shape:
        raise ValueError(f"workim has shape {workim.shape}, expected {work.shape}")
    c0 = np.asarray(c0, dtype=float).reshape(3, 3, 3, 3)
    s0 = np.asarray(s0, dtype=float).reshape(3, 3, 3, 3)

    m1, m2, m3 = work.shape[2:]
    xk, yk, zk = (np.asarray(v, dtype=float).ravel() for v in (xk, yk, zk))
    for values, m, axis in ((xk, m1, "xk"), (yk, m2, "yk"), (zk, m3, "zk")):
        if values.size != m:
            raise ValueError(f"{axis} has {values.size} values, expected {m}")

    n1g, n2g, n3g = (int(n) for n in global_shape)
    s1, s2, s3 = (int(s) for s in local_start)
    gx = np.arange(m1) + s1
    gy = np.arange(m2) + s2
    gz = np.arange(m3) + s3

    kvec = np.stack(
        np.broadcast_arrays(xk[:, None, None], yk[None, :, None], zk[None, None, :]),
        axis=-1,
    )
    norm = np.linalg.norm(kvec, axis=-1, keepdims=True)
    unit = np.divide(kvec, norm, out=kvec.copy(), where=norm != 0.0)

    z_nyquist = _nyquist(gz, n3g) if n3g > 1 else np.zeros(m3, dtype=bool)
    nyquist = (
        _nyquist(gx, n1g)[:, None, None]
        | _nyquist(gy, n2g)[None, :, None]
        | z_nyquist[None, None, :]
    )
    origin = (gx == 0)[:, None, None] & (gy == 0)[None, :, None] & (gz == 0)[None, None, :]
    regular = ~nyquist & ~origin

    green = np.zeros((m1, m2, m3, 3, 3, 3, 3))
    green[nyquist] = -s0
    if regular.any():
        u = unit[regular]
        acoustic = np.einsum("ijkl,nj,nl->nik", c0, u, u)
        inverse = np.linalg.inv(acoustic)
        green[regular] = -np.einsum("npi,nq,nj->npqij", inverse, u, u)

    real = np.einsum("abcijkl,klabc->ijabc", green, work)
    imag = np.einsum("abcijkl,klabc->ijabc", green, workim)
    real[:, :, origin] = 0.0
    imag[:, :, origin] = 0.0
    return real, imag