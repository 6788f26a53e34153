"""Writer for legacy ASCII VTK files holding scalars on a structured point grid."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np

__all__ = ["VTKUniformGridWriter"]


class VTKUniformGridWriter:
    """Write scalar datasets on an ``n1`` x ``n2`` x ``n3`` grid of unit spacing."""

    def __init__(self, n1, n2, n3):
        self.n1 = int(n1)
        self.n2 = int(n2)
        self.n3 = int(n3)
        self._file: TextIO | None = None

    @property
    def num_points(self) -> int:
        return self.n1 * self.n2 * self.n3

    def open_file(self, path) -> None:
        """Open ``path`` for writing, replacing any file already there."""
        self.close_file()
        self._file = Path(path).open("w")

    def _stream(self) -> TextIO:
        if self._file is None:
            raise RuntimeError("no VTK file is open")
        return self._file

    def write_header(self) -> None:
        """Write the file heading and the grid description."""
        out = self._stream()
        out.write("# vtk DataFile Version 3.0\n")
        out.write("Simulation outputs\n")
        out.write("ASCII\n")
        out.write("DATASET STRUCTURED_POINTS\n")
        out.write(f"DIMENSIONS {self.n1}  {self.n2}  {self.n3}\n")
        out.write("ORIGIN 0 0 0\n")
        out.write("SPACING 1 1 1\n")
        out.write(f"POINT_DATA {self.num_points}\n")

    def write_scalar_dataset(self, data, name, data_type) -> None:
        """Write one scalar per grid point, taken in the array's flattened order."""
        out = self._stream()
        values = np.asarray(data).ravel()
        if values.size < self.num_points:
            raise ValueError(f"need {self.num_points} values, got {values.size}")
        out.write(f"SCALARS {name} {data_type}\n")
        out.write("LOOKUP_TABLE default\n")
        out.writelines(" %12.6E\n" % v for v in values[: self.num_points].tolist())

    def close_file(self) -> None:
        """Close the file if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close_file()
        return False