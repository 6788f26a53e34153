"""Per-step updates of deformation fields, macroscopic averages and crystal orientations."""

from __future__ import annotations

import math

import numpy as np

from crystalfft.orient import orient
from crystalfft.vonmises import vm

__all__ = [
    "MacroStep",
    "step_update_disgrad",
    "step_update_velgrad",
    "step_vm_calc",
    "update_orient",
    "update_rve_spacing",
]


def _tensor_field(field, name: str) -> np.ndarray:
    array = np.asarray(field, dtype=float)
    if array.ndim != 5 or array.shape[:2] != (3, 3):
        raise ValueError(f"{name} must have shape (3, 3, n1, n2, n3), got {array.shape}")
    return array


def _tensor(value) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(3, 3)


def step_update_disgrad(disgrad, udot, tdot) -> tuple[np.ndarray, np.ndarray]:
    """Advance ``disgrad`` by the imposed velocity gradient over ``tdot``.

    Returns a copy of the field at the start of the step and the advanced field.
    """
    disgrad = _tensor_field(disgrad, "disgrad")
    advanced = disgrad + _tensor(udot)[:, :, None, None, None] * tdot
    return disgrad.copy(), advanced


def step_update_velgrad(disgrad, velgrad_prev, tdot) -> np.ndarray:
    """Return the velocity gradient from the fields at the end and start of the step."""
    disgrad = _tensor_field(disgrad, "disgrad")
    velgrad_prev = _tensor_field(velgrad_prev, "velgrad_prev")
    return (disgrad - velgrad_prev) / tdot


class MacroStep:
    """Macroscopic displacement gradient carried from one step to the next."""

    def __init__(self):
        self.disgradmacrot = np.zeros((3, 3))
        self.disgradmacroactual = np.zeros((3, 3))
        self.velgradmacro = np.zeros((3, 3))
        self.evm = 0.0
        self.dvm = 0.0

    def update(self, disgradmacro, ddisgradmacroacum, tdot) -> None:
        """Close a step: set the actual gradient, its rate and their von Mises measures."""
        self.disgradmacroactual = _tensor(disgradmacro) + _tensor(ddisgradmacroacum)
        self.velgradmacro = (self.disgradmacroactual - self.disgradmacrot) / tdot
        self.evm = vm(self.disgradmacroactual)
        self.dvm = vm(self.velgradmacro)
        self.disgradmacrot = self.disgradmacroactual.copy()

    def initial_guess(self, udot, tdot) -> np.ndarray:
        """Return the purely elastic guess of the macroscopic gradient at the end of the step."""
        return self.disgradmacrot + _tensor(udot) * tdot


def step_vm_calc(ept, edotp, tdot, wgt):
    """Accumulate plastic strain and average it over the grid.

    Returns ``(ept, epav, edotpav, evmp, dvmp)``: the updated plastic strain
    field, the weighted averages of plastic strain and plastic strain rate,
    and their von Mises norms.
    """
    ept = _tensor_field(ept, "ept")
    edotp = _tensor_field(edotp, "edotp")
    ept = ept + edotp * tdot
    epav = ept.sum(axis=(2, 3, 4)) * wgt
    edotpav = edotp.sum(axis=(2, 3, 4)) * wgt
    evmp = math.sqrt(2.0 / 3.0 * float(np.sum(epav**2)))
    dvmp = math.sqrt(2.0 / 3.0 * float(np.sum(edotpav**2)))
    return ept, epav, edotpav, evmp, dvmp


def _axial_norm(skew: np.ndarray) -> np.ndarray:
    return np.sqrt(skew[2, 1] ** 2 + skew[0, 2] ** 2 + skew[1, 0] ** 2)


def update_orient(ag, velgrad, gamdot, dnca, dbca, nsyst, jphase, igas, tomtot, wgt, tdot):
    """Rotate the crystal orientation at every solid point over one step.

    ``ag`` and ``velgrad`` have shape ``(3, 3, n1, n2, n3)``; ``gamdot`` has
    shape ``(nsys, n1, n2, n3)``; ``dnca`` and ``dbca`` hold slip plane normals
    and directions with shape ``(3, nsys, nphases)``. ``jphase`` gives the
    zero-based phase of each point; ``nsyst`` and ``igas`` give, per phase,
    the number of slip systems and whether the phase is a gas (not rotated).

    Returns the new orientations and the average plastic and local rotation rates.
    """
    ag = _tensor_field(ag, "ag").copy()
    velgrad = _tensor_field(velgrad, "velgrad")
    gamdot = np.asarray(gamdot, dtype=float)
    dnca = np.asarray(dnca, dtype=float)
    dbca = np.asarray(dbca, dtype=float)
    jphase = np.asarray(jphase, dtype=int)
    spin = _tensor(tomtot)

    rslbar = 0.0
    rlcbar = 0.0
    for phase, (is_gas, nsys) in enumerate(zip(igas, nsyst)):
        mask = jphase == phase
        if is_gas or not mask.any():
            continue

        aa = ag[:, :, mask]
        grad = velgrad[:, :, mask]
        rotloc = 0.5 * (grad - grad.transpose(1, 0, 2))

        normals = np.einsum("ijp,js->isp", aa, dnca[:, :nsys, phase])
        directions = np.einsum("ijp,js->isp", aa, dbca[:, :nsys, phase])
        distor = np.einsum(
            "isp,jsp,sp->ijp", directions, normals, gamdot[:nsys][:, mask]
        )
        rotslip = 0.5 * (distor - distor.transpose(1, 0, 2))

        rslbar += float(np.sum(_axial_norm(rotslip))) * wgt
        rlcbar += float(np.sum(_axial_norm(rotloc))) * wgt

        rot = (spin[:, :, None] + rotloc - rotslip) * tdot
        rotated = [
            orient(a, r)
            for a, r in zip(np.moveaxis(aa, -1, 0), np.moveaxis(rot, -1, 0))
        ]
        ag[:, :, mask] = np.stack(rotated, axis=-1)

    return ag, rslbar, rlcbar


def update_rve_spacing(delt, dsim, npts, tdot) -> np.ndarray:
    """Return the grid spacing stretched by the diagonal strain rate over ``tdot``.

    The third spacing is left unchanged on a single-layer grid.
    """
    spacing = [float(d) for d in np.asarray(delt, dtype=float).ravel()]
    rate = _tensor(dsim)
    counts = [int(n) for n in npts]
    if len(spacing) != 3 or len(counts) != 3:
        raise ValueError("delt and npts must each have three entries")

    updated = list(spacing)
    for axis, (d, n) in enumerate(zip(spacing, counts)):
        if axis == 2 and n <= 1:
            continue
        velmax = rate[axis, axis] * d * (n - 1)
        updated[axis] = (d * (n - 1) + velmax * tdot) / (n - 1)
    return np.array(updated)