# crystalfft

Building blocks for FFT-based elasto-viscoplastic (EVP-FFT) crystal plasticity
simulations on a regular voxel grid, written with NumPy.

Fields are NumPy arrays. Tensor fields have shape `(3, 3, n1, n2, n3)`; the
functions return new arrays and leave their inputs unchanged.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## What is inside

- `crystalfft.mathfunc`: Gauss-Jordan matrix inversion without pivoting
  (`invert_matrix`), Gaussian elimination with partial pivoting
  (`solve_linear_system`), the in-place row operations `swap_rows`,
  `scale_row` and `add_rows`, and `pow_int` for integer powers by repeated
  squaring. Both solvers raise `numpy.linalg.LinAlgError` on a zero pivot.
- `crystalfft.vonmises`: von Mises equivalent strain (`vm`) and stress
  (`vm_stress`) of a 3x3 tensor.
- `crystalfft.voigt`: conversions between 6x6 Voigt matrices and 3x3x3x3
  tensors (`to_fourth_order`, `to_second_order`, `to_fourth_order_scaled`,
  `to_fourth_order_antisymmetric`) and the index pairs `VOIGT_PAIRS`.
- `crystalfft.orient`: the rotation built by the Rodrigues formula from the
  skew part of an increment (`rotation_from_spin`) and the rotated
  orientation matrix (`orient`).
- `crystalfft.utilities`: `minval`, `maxval`, `sum_array`, `format_array`,
  `print_array`, and text dumps to files named `rank<rank>_<name>`
  (`print_array_to_file`, `write_values_to_file`).
- `crystalfft.fft`: `RealFFT3D`, a real-to-complex transform that maps a grid
  of shape `(n1, n2, n3)` to a half spectrum of shape `(n1 // 2 + 1, n2, n3)`,
  with a fully scaled backward transform when `scale` is true; and
  `ComplexFFT3D`, a full complex transform.
- `crystalfft.vtk_writer`: `VTKUniformGridWriter`, legacy ASCII VTK
  structured-points output of scalar datasets; usable as a context manager.
- `crystalfft.output_files`: `OutputFileManager` creates `vm.out`,
  `str_str.out`, `err.out` and `conv.out` in a directory, writes the column
  headings, and appends one line per step to `vm.out` and `str_str.out` from
  a `MacroState`; `format_e` gives the 11-wide scientific number format.
- `crystalfft.boundary`: `check_iudot` and `check_mixed_bc` validate the
  imposed strain-rate and stress flags and raise `BoundaryConditionError`;
  `decompose_vel_grad` splits a velocity gradient into strain rate and
  rotation rate; `time_increment` picks the time step for control modes
  `-1` and `0` (modes above zero raise `NotImplementedError`).
- `crystalfft.fields`: `initialize_disgrad` and `inverse_the_greens`, which
  applies the Green operator of the reference medium to a polarization
  spectrum.
- `crystalfft.step`: `step_update_disgrad`, `step_update_velgrad`,
  `MacroStep` for the macroscopic displacement gradient, `step_vm_calc` for
  plastic strain averages, `update_orient` for texture evolution and
  `update_rve_spacing` for the grid spacing.
- `crystalfft.micro_fields`: `symmetrize`, per-point von Mises maps
  (`vm_field`) and inverse pole figure colours (`ipf_color`, `ipf_colors`).
- `crystalfft.pvtu`: parallel VTK unstructured-grid output of a micro state:
  `point_coordinates`, `MicroStateFields`, `write_pvtu_index`,
  `write_vtu_piece` and `write_micro_state`, which writes
  `pvtu/MicroState_<step>.pvtu` (on rank 0) and one `.vtu` piece per rank.

## Example

```python
import numpy as np
from crystalfft.vonmises import vm
from crystalfft.mathfunc import invert_matrix
from crystalfft.vtk_writer import VTKUniformGridWriter

strain = np.diag([1.0, -0.5, -0.5])
print(vm(strain))

inverse = invert_matrix(np.array([[4.0, 7.0], [2.0, 6.0]]))

with VTKUniformGridWriter(2, 2, 1) as writer:
    writer.open_file("field.vtk")
    writer.write_header()
    writer.write_scalar_dataset(np.arange(4.0), "phase", "float")
```

## What the package does not do

It is a library of the pieces of a solver step, not a solver. There is no
command to run, no reader for simulation input files or crystal data, no
driver that iterates a load step to convergence, and no HDF5 or XDMF output.
Nothing is distributed across processes: the `rank` and `num_ranks`
arguments only choose file names and which files get written, and the
caller is responsible for handing each rank its own part of the grid.