"""Text output of macroscopic run history: von Mises, stress-strain, error and convergence files."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import numpy as np

from crystalfft.voigt import VOIGT_PAIRS

__all__ = ["MacroState", "OutputFileManager", "format_e"]

VM_HEADER = "EVM,EVMP,DVM,DVMP,SVM,SVM1\n"
STR_STR_HEADER = (
    "E11,E22,E33,E23,E13,E12,"
    "S11,S22,S33,S23,S13,S12,"
    "EP11,EP22,EP33,EP23,EP13,EP12,"
    "E_dot11,E_dot22,E_dot33,E_dot23,E_dot13,E_dot12,"
    "E_dotP11,E_dotP22,E_dotP33,E_dotP23,E_dotP13,E_dotP12,"
    "EVM,EPVM,DVM,DPVM,SVM\n"
)
ERR_HEADER = "STEP,IT,ERRE,ERRS,SVM,AVG_NR_IT\n"

_FILE_NAMES = ("vm.out", "str_str.out", "err.out", "conv.out")
_HEADERS = {"vm.out": VM_HEADER, "str_str.out": STR_STR_HEADER, "err.out": ERR_HEADER}

_WIDTH = 11


def format_e(value) -> str:
    """Format a number in 11-wide zero-padded scientific notation with four decimals."""
    value = float(value)
    if not math.isfinite(value):
        return f"{value:.4e}".rjust(_WIDTH)
    return f"{value:0{_WIDTH}.4e}"


def _zeros33() -> np.ndarray:
    return np.zeros((3, 3))


@dataclass
class MacroState:
    """Macroscopic averages of one load step."""

    evm: float = 0.0
    evmp: float = 0.0
    dvm: float = 0.0
    dvmp: float = 0.0
    svm: float = 0.0
    svm1: float = 0.0
    disgradmacroactual: np.ndarray = field(default_factory=_zeros33)
    scauav: np.ndarray = field(default_factory=_zeros33)
    epav: np.ndarray = field(default_factory=_zeros33)
    velgradmacro: np.ndarray = field(default_factory=_zeros33)
    edotpav: np.ndarray = field(default_factory=_zeros33)


def _voigt_components(tensor) -> list[float]:
    t = np.asarray(tensor, dtype=float).reshape(3, 3)
    return [float(t[i, j]) for i, j in VOIGT_PAIRS]


class OutputFileManager:
    """Owns the run history files written in ``directory``."""

    def __init__(self, directory="."):
        self.directory = Path(directory)
        self._files: dict[str, TextIO] = {}

    @property
    def is_open(self) -> bool:
        return bool(self._files)

    def open_files(self) -> None:
        """Create the output files and write their column headings."""
        self.close()
        try:
            for name in _FILE_NAMES:
                handle = (self.directory / name).open("w")
                self._files[name] = handle
                handle.write(_HEADERS.get(name, ""))
        except OSError:
            self.close()
            raise

    def _file(self, name: str) -> TextIO:
        try:
            return self._files[name]
        except KeyError:
            raise RuntimeError("output files are not open") from None

    def write_macro_state(self, state: MacroState) -> None:
        """Append one line to ``vm.out`` and one to ``str_str.out``."""
        vm_values = [state.evm, state.evmp, state.dvm, state.dvmp, state.svm, state.svm1]
        str_values = (
            _voigt_components(state.disgradmacroactual)
            + _voigt_components(state.scauav)
            + _voigt_components(state.epav)
            + _voigt_components(state.velgradmacro)
            + _voigt_components(state.edotpav)
            + [state.evm, state.evmp, state.dvm, state.dvmp, state.svm]
        )
        vm_file = self._file("vm.out")
        str_file = self._file("str_str.out")
        vm_file.write(",".join(map(format_e, vm_values)) + "\n")
        str_file.write(",".join(map(format_e, str_values)) + "\n")

    def close(self) -> None:
        """Close every open output file."""
        files, self._files = self._files, {}
        for handle in files.values():
            handle.close()

    def __enter__(self):
        if not self.is_open:
            self.open_files()
        return self

    def __exit__(self, *args):
        self.close()
        return False