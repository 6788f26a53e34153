import numpy as np
import pytest

from crystalfft.vtk_writer import VTKUniformGridWriter


def _write(path, data, name="phase", data_type="float"):
    with VTKUniformGridWriter(2, 3, 4) as writer:
        writer.open_file(path)
        writer.write_header()
        writer.write_scalar_dataset(data, name, data_type)
    return path.read_text().splitlines()


def test_header_lines(tmp_path):
    lines = _write(tmp_path / "out.vtk", np.zeros(24))
    assert lines[:8] == [
        "# vtk DataFile Version 3.0",
        "Simulation outputs",
        "ASCII",
        "DATASET STRUCTURED_POINTS",
        "DIMENSIONS 2  3  4",
        "ORIGIN 0 0 0",
        "SPACING 1 1 1",
        "POINT_DATA 24",
    ]


def test_scalar_section_heading(tmp_path):
    lines = _write(tmp_path / "out.vtk", np.zeros(24), "stress", "double")
    assert lines[8] == "SCALARS stress double"
    assert lines[9] == "LOOKUP_TABLE default"
    assert len(lines) == 10 + 24


def test_values_round_trip(tmp_path):
    rng = np.random.default_rng(5)
    data = rng.uniform(-100, 100, size=(4, 3, 2))
    lines = _write(tmp_path / "out.vtk", data)
    parsed = np.array([float(line) for line in lines[10:]])
    np.testing.assert_allclose(parsed, data.ravel(), rtol=1e-6)


def test_value_format(tmp_path):
    lines = _write(tmp_path / "out.vtk", np.full(24, 1.5))
    assert lines[10] == " 1.500000E+00"
    assert all(len(line) == 13 for line in lines[10:])


def test_too_few_values_raises(tmp_path):
    writer = VTKUniformGridWriter(2, 3, 4)
    writer.open_file(tmp_path / "out.vtk")
    with pytest.raises(ValueError):
        writer.write_scalar_dataset(np.zeros(5), "x", "float")
    writer.close_file()


def test_write_without_open_raises():
    writer = VTKUniformGridWriter(1, 1, 1)
    with pytest.raises(RuntimeError):
        writer.write_header()


def test_close_file_twice_is_harmless(tmp_path):
    path = tmp_path / "out.vtk"
    writer = VTKUniformGridWriter(1, 1, 1)
    writer.open_file(path)
    writer.write_header()
    writer.close_file()
    writer.close_file()
    assert path.read_text().splitlines()[-1] == "POINT_DATA 1"