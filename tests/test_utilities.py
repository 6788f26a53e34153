import numpy as np
import pytest

from crystalfft.utilities import (
    format_array,
    maxval,
    minval,
    print_array,
    print_array_to_file,
    rank_filename,
    sum_array,
    write_values_to_file,
)


def test_minval_maxval():
    data = [3.5, -1.25, 8.0, 2.0]
    assert minval(data) == -1.25
    assert maxval(data) == 8.0


def test_minval_empty_raises():
    with pytest.raises(ValueError):
        minval([])


def test_sum_array_matches_builtin():
    data = np.linspace(0.0, 1.0, 11)
    assert sum_array(data) == pytest.approx(float(np.sum(data)))
    assert sum_array([]) == 0.0


def test_rank_filename():
    assert rank_filename(3, "out.txt") == "rank3_out.txt"


def test_format_array_layout():
    text = format_array([1.0, 2.5, -3.0, 4.0], 2, 2)
    lines = text.splitlines()
    assert len(lines) == 2
    assert lines[0] == "  1.0000e+00  2.5000e+00"
    assert [float(x) for x in lines[1].split()] == [-3.0, 4.0]


def test_format_array_integers_plain():
    assert format_array(np.array([1, 2, 3]), 1, 3) == "  1  2  3\n"


def test_format_array_too_few_values():
    with pytest.raises(ValueError):
        format_array([1.0, 2.0], 2, 2)


def test_print_array(capsys):
    print_array([1.0, 2.0, 3.0, 4.0], 2, 2)
    assert capsys.readouterr().out == format_array([1.0, 2.0, 3.0, 4.0], 2, 2)


def test_print_array_to_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    values = np.arange(6.0).reshape(2, 3)
    path = print_array_to_file(values, 2, 3, 1, "dump.txt")
    assert path.name == "rank1_dump.txt"
    assert path.read_text() == format_array(values, 2, 3)


def test_write_values_to_file_floats(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    values = [1.5, -2.25, 1e-10]
    path = write_values_to_file(np.array(values), 0, "vals.txt")
    lines = path.read_text().splitlines()
    assert [float(line) for line in lines] == values
    assert all(len(line) == 24 for line in lines)
    assert path.name == "rank0_vals.txt"


def test_write_values_to_file_ints(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    values = [7, -12, 300]
    path = write_values_to_file(np.array(values), 2, "ids.txt")
    lines = path.read_text().splitlines()
    assert [int(line) for line in lines] == values
    assert all(len(line) == 13 for line in lines)