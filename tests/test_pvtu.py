import re
import struct

import numpy as np
import pytest

from crystalfft.pvtu import (
    MicroStateFields,
    point_coordinates,
    write_micro_state,
    write_pvtu_index,
    write_vtu_piece,
)

MARKER = b'<AppendedData encoding="raw">\n_'
TAIL = b"\n</AppendedData>\n</VTKFile>\n"


def make_fields(shape=(2, 1, 1), seed=0):
    rng = np.random.default_rng(seed)
    strain = rng.normal(size=(3, 3) + shape)
    strain = 0.5 * (strain + strain.swapaxes(0, 1))
    stress = rng.normal(size=(3, 3) + shape)
    stress = 0.5 * (stress + stress.swapaxes(0, 1))
    phase = np.arange(int(np.prod(shape))).reshape(shape) + 1
    return MicroStateFields(
        points=point_coordinates(shape, (1.0, 1.0, 1.0), np.eye(3), (0, 0, 0)),
        phase_id=phase,
        grain_id=phase * 10,
        strain=strain,
        stress=stress,
        pl_strain_rate=strain * 2.0,
        el_strain=strain * 0.5,
        ipf_colors=rng.integers(0, 256, size=(3,) + shape, dtype=np.uint8),
    )


def read_appended(path):
    raw = path.read_bytes()
    head, data = raw.split(MARKER, 1)
    text = head.decode("ascii")
    blocks = {}
    for name, offset in re.findall(r'Name="([^"]+)"[^>]*offset="(\d+)"', text):
        offset = int(offset)
        (size,) = struct.unpack_from("<Q", data, offset)
        blocks[name] = data[offset + 8 : offset + 8 + size]
    return text, data, blocks


def test_point_coordinates_first_corner_and_shape():
    coords = point_coordinates((2, 3, 4), (2.0, 3.0, 4.0), np.eye(3), (0, 0, 0))
    assert coords.shape == (3, 3, 4, 5)
    np.testing.assert_allclose(coords[:, 0, 0, 0], [1.0, 1.5, 2.0])


def test_point_coordinates_local_start_shifts_grid():
    base = point_coordinates((3, 2, 2), (0.5, 1.0, 2.0), np.eye(3), (0, 0, 0))
    shifted = point_coordinates((3, 2, 2), (0.5, 1.0, 2.0), np.eye(3), (1, 0, 0))
    np.testing.assert_allclose(shifted[:, :-1], base[:, 1:])


def test_point_coordinates_identity_spacing_equals_delt():
    coords = point_coordinates((3, 2, 2), (0.5, 1.0, 2.0), np.eye(3), (0, 0, 0))
    np.testing.assert_allclose(np.diff(coords[0], axis=0), 0.5)
    np.testing.assert_allclose(np.diff(coords[2], axis=2), 2.0)


def test_point_coordinates_rejects_bad_defgrad():
    with pytest.raises(ValueError):
        point_coordinates((2, 2, 2), (1, 1, 1), np.eye(2), (0, 0, 0))


def test_fields_reject_wrong_shape():
    fields = make_fields()
    with pytest.raises(ValueError):
        MicroStateFields(
            points=fields.points,
            phase_id=fields.phase_id,
            grain_id=fields.grain_id,
            strain=fields.strain[:, :, :1],
            stress=fields.stress,
            pl_strain_rate=fields.pl_strain_rate,
            el_strain=fields.el_strain,
            ipf_colors=fields.ipf_colors,
        )


def test_pvtu_index_lists_pieces_and_time(tmp_path):
    path = write_pvtu_index(tmp_path / "index.pvtu", 3, 0.25, 2)
    text, data, blocks = read_appended(path)
    assert re.findall(r'<Piece Source="([^"]+)"/>', text) == [
        "MicroState_00003/MicroState_00003_00000.vtu",
        "MicroState_00003/MicroState_00003_00001.vtu",
    ]
    assert struct.unpack("<d", blocks["TimeValue"]) == (0.25,)
    assert data.endswith(TAIL)
    assert '<PDataArray type="UInt8" Name="IPFColor" NumberOfComponents="3"/>' in text


def test_pvtu_index_rejects_no_ranks(tmp_path):
    with pytest.raises(ValueError):
        write_pvtu_index(tmp_path / "index.pvtu", 1, 0.0, 0)


def test_vtu_single_cell_connectivity(tmp_path):
    path = write_vtu_piece(tmp_path / "p.vtu", make_fields((1, 1, 1)), 0, 0.0)
    _, _, blocks = read_appended(path)
    connect = np.frombuffer(blocks["connectivity"], dtype="<i4").tolist()
    assert connect == [0, 1, 3, 2, 4, 5, 7, 6]
    assert np.frombuffer(blocks["types"], dtype="<i4").tolist() == [12]
    assert np.frombuffer(blocks["offsets"], dtype="<i4").tolist() == [8]


def test_vtu_blocks_are_contiguous(tmp_path):
    fields = make_fields((2, 3, 2))
    path = write_vtu_piece(tmp_path / "p.vtu", fields, 1, 1.5)
    text, data, blocks = read_appended(path)
    assert data.endswith(TAIL)
    assert sum(8 + len(b) for b in blocks.values()) == len(data) - len(TAIL)
    assert struct.unpack("<d", blocks["TimeValue"]) == (1.5,)
    n1, n2, n3 = fields.phase_id.shape
    assert f'NumberOfCells="{n1 * n2 * n3}"' in text


def test_vtu_cell_data_round_trip(tmp_path):
    fields = make_fields((2, 3, 1))
    path = write_vtu_piece(tmp_path / "p.vtu", fields, 4, 0.0)
    _, _, blocks = read_appended(path)

    phase = np.frombuffer(blocks["phase_id"], dtype="<i4")
    np.testing.assert_array_equal(phase, fields.phase_id.ravel(order="F"))
    grain = np.frombuffer(blocks["grain_id"], dtype="<i4")
    np.testing.assert_array_equal(grain, fields.grain_id.ravel(order="F"))
    ranks = np.frombuffer(blocks["rank"], dtype="<i4")
    assert set(ranks.tolist()) == {4}

    strain = np.frombuffer(blocks["strain"], dtype="<f8").reshape(-1, 6)
    s = fields.strain[:, :, 1, 0, 0]
    np.testing.assert_allclose(
        strain[1], [s[0, 0], s[1, 1], s[2, 2], s[0, 1], s[1, 2], s[0, 2]]
    )

    ipf = np.frombuffer(blocks["IPFColor"], dtype=np.uint8).reshape(-1, 3)
    np.testing.assert_array_equal(ipf[2], fields.ipf_colors[:, 0, 1, 0])

    points = np.frombuffer(blocks["Points"], dtype="<f8").reshape(-1, 3)
    np.testing.assert_allclose(points[1], fields.points[:, 1, 0, 0])
    assert points.shape[0] == fields.points[0].size


def test_vtu_vm_stress_of_uniaxial_state(tmp_path):
    fields = make_fields((1, 1, 1))
    fields.stress = np.zeros((3, 3, 1, 1, 1))
    fields.stress[0, 0] = 7.0
    path = write_vtu_piece(tmp_path / "p.vtu", fields, 0, 0.0)
    _, _, blocks = read_appended(path)
    np.testing.assert_allclose(np.frombuffer(blocks["vm-stress"], dtype="<f8"), [7.0])


def test_write_micro_state_layout(tmp_path):
    fields = make_fields()
    piece0 = write_micro_state(tmp_path, 5, 0.5, fields, 2, 0)
    index = tmp_path / "pvtu" / "MicroState_00005.pvtu"
    assert index.is_file()
    assert piece0 == tmp_path / "pvtu" / "MicroState_00005" / "MicroState_00005_00000.vtu"
    _, _, blocks = read_appended(index)
    assert struct.unpack("<d", blocks["TimeValue"]) == (2.5,)


def test_write_micro_state_other_rank_skips_index(tmp_path):
    piece = write_micro_state(tmp_path, 2, 1.0, make_fields(), 3, 2)
    assert piece.name == "MicroState_00002_00002.vtu"
    assert piece.is_file()
    assert not (tmp_path / "pvtu" / "MicroState_00002.pvtu").exists()


def test_write_micro_state_rejects_bad_rank(tmp_path):
    with pytest.raises(ValueError):
        write_micro_state(tmp_path, 1, 1.0, make_fields(), 2, 2)