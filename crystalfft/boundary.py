"""Checks and decomposition of the imposed macroscopic boundary conditions."""

from __future__ import annotations

import numpy as np

__all__ = [
    "BoundaryConditionError",
    "check_iudot",
    "check_mixed_bc",
    "decompose_vel_grad",
    "time_increment",
]


class BoundaryConditionError(ValueError):
    """Raised when the imposed strain-rate and stress flags are inconsistent."""


def _flags_3x3(iudot) -> np.ndarray:
    flags = np.asarray(iudot, dtype=int)
    if flags.size != 9:
        raise ValueError(f"expected 3x3 flags, got {flags.size} values")
    return flags.reshape(3, 3)


def check_iudot(iudot) -> None:
    """Validate the flags of imposed velocity-gradient components.

    Raises ``BoundaryConditionError`` when exactly two diagonal components are
    imposed, or when neither component of an off-diagonal pair is imposed.
    """
    flags = _flags_3x3(iudot)
    if int(np.diagonal(flags).sum()) == 2:
        raise BoundaryConditionError(
            "check diagonal boundary conditions iudot: "
            "cannot enforce only two deviatoric components"
        )
    pair_sums = flags + flags.T
    off_diagonal = ~np.eye(3, dtype=bool)
    if np.any(pair_sums[off_diagonal] == 0):
        raise BoundaryConditionError("check off-diagonal boundary conditions iudot")


def check_mixed_bc(iudot, iscau) -> tuple[int, ...]:
    """Return the strain-rate flags in Voigt order after checking them against ``iscau``.

    ``iscau`` holds six stress flags in the order 11, 22, 33, 23, 13, 12. Every
    component must be imposed either through the strain rate or through the
    stress, never both and never neither.
    """
    flags = _flags_3x3(iudot)
    stress_flags = tuple(int(v) for v in np.asarray(iscau, dtype=int).ravel())
    if len(stress_flags) != 6:
        raise ValueError(f"expected six stress flags, got {len(stress_flags)}")

    idsim = (
        int(flags[0, 0]),
        int(flags[1, 1]),
        int(flags[2, 2]),
        int(flags[1, 2] == 1 and flags[2, 1] == 1),
        int(flags[0, 2] == 1 and flags[2, 0] == 1),
        int(flags[0, 1] == 1 and flags[1, 0] == 1),
    )

    for strain_flag, stress_flag in zip(idsim, stress_flags):
        if stress_flag * strain_flag != 0 or stress_flag + strain_flag != 1:
            raise BoundaryConditionError(
                "check boundary conditions on strain-rate and stress: "
                f"IDSIM = {' '.join(map(str, idsim))}, "
                f"ISCAU = {' '.join(map(str, stress_flags))}"
            )
    return idsim


def decompose_vel_grad(vel_grad) -> tuple[np.ndarray, np.ndarray]:
    """Split a velocity gradient into its symmetric strain rate and skew rotation rate."""
    grad = np.asarray(vel_grad, dtype=float)
    if grad.size != 9:
        raise ValueError(f"expected a 3x3 tensor, got {grad.size} values")
    grad = grad.reshape(3, 3)
    dsim = 0.5 * (grad + grad.T)
    tomtot = 0.5 * (grad - grad.T)
    return dsim, tomtot


def time_increment(value, ictrl, dvm) -> float:
    """Return the time step for the control mode ``ictrl``.

    With ``ictrl == -1`` the value is the time step itself; with ``ictrl == 0``
    it is a von Mises strain increment, divided by the strain rate ``dvm``.
    """
    if ictrl == -1:
        return float(value)
    if ictrl == 0:
        return float(value) / float(dvm)
    if ictrl > 0:
        raise NotImplementedError("ictrl > 0 is not implemented")
    raise ValueError(f"unknown control mode ictrl={ictrl}")