"""Parallel VTK unstructured-grid output (.pvtu index and per-rank .vtu pieces) of micro states.

Every grid cell becomes one hexahedron. Cell data are written in raw appended
binary form, little endian, each block preceded by its byte count as a UInt64.
Cells are ordered with the first grid axis varying fastest.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from crystalfft.micro_fields import vm_field

__all__ = [
    "MicroStateFields",
    "point_coordinates",
    "write_pvtu_index",
    "write_vtu_piece",
    "write_micro_state",
]

_NAME = "MicroState"
_PVTU_DIR = "pvtu"
_VTK_HEXAHEDRON = 12
_NODES_PER_CELL = 8
_NUM_DIMS = 3

# Order in which the six distinct components of a symmetric tensor are written.
_TENSOR_ORDER = ((0, 0), (1, 1), (2, 2), (0, 1), (1, 2), (0, 2))

# Cell arrays in file order: (name, VTK type, number of components or None).
_CELL_ARRAYS = (
    ("rank", "Int32", None),
    ("phase_id", "Int32", None),
    ("grain_id", "Int32", None),
    ("vm-strain", "Float64", None),
    ("vm-stress", "Float64", None),
    ("vm-pl-strain-rate", "Float64", None),
    ("vm-el-strain", "Float64", None),
    ("strain", "Float64", 6),
    ("stress", "Float64", 6),
    ("pl-strain-rate", "Float64", 6),
    ("el-strain", "Float64", 6),
    ("IPFColor", "UInt8", 3),
)

_VTU_HEADER = (
    '<VTKFile type="UnstructuredGrid" version="1.0" '
    'byte_order="LittleEndian" header_type="UInt64">\n'
)
_PVTU_HEADER = (
    '<VTKFile type="PUnstructuredGrid" version="1.0" '
    'byte_order="LittleEndian" header_type="UInt64">\n'
)
_APPENDED_START = '<AppendedData encoding="raw">\n_'
_APPENDED_END = "</AppendedData>\n</VTKFile>\n"


@dataclass(eq=False)
class MicroStateFields:
    """Per-rank fields of one micro state on a grid of ``(n1, n2, n3)`` cells.

    ``points`` has shape ``(3, n1 + 1, n2 + 1, n3 + 1)``; ``phase_id`` and
    ``grain_id`` have shape ``(n1, n2, n3)``; the tensor fields ``strain``,
    ``stress``, ``pl_strain_rate`` and ``el_strain`` have shape
    ``(3, 3, n1, n2, n3)`` and are written as given (symmetrize strains
    beforehand); ``ipf_colors`` has shape ``(3, n1, n2, n3)``.
    """

    points: np.ndarray
    phase_id: np.ndarray
    grain_id: np.ndarray
    strain: np.ndarray
    stress: np.ndarray
    pl_strain_rate: np.ndarray
    el_strain: np.ndarray
    ipf_colors: np.ndarray

    def __post_init__(self):
        self.phase_id = np.asarray(self.phase_id, dtype=int)
        if self.phase_id.ndim != 3:
            raise ValueError(f"phase_id must have three axes, got shape {self.phase_id.shape}")
        shape = self.phase_id.shape
        n1, n2, n3 = shape

        self.grain_id = np.asarray(self.grain_id, dtype=int)
        self.points = np.asarray(self.points, dtype=float)
        self.ipf_colors = np.asarray(self.ipf_colors, dtype=np.uint8)
        for name in ("strain", "stress", "pl_strain_rate", "el_strain"):
            setattr(self, name, np.asarray(getattr(self, name), dtype=float))

        expected = {
            "grain_id": shape,
            "points": (3, n1 + 1, n2 + 1, n3 + 1),
            "strain": (3, 3) + shape,
            "stress": (3, 3) + shape,
            "pl_strain_rate": (3, 3) + shape,
            "el_strain": (3, 3) + shape,
            "ipf_colors": (3,) + shape,
        }
        for name, want in expected.items():
            got = getattr(self, name).shape
            if got != want:
                raise ValueError(f"{name} has shape {got}, expected {want}")


def point_coordinates(shape, delt, defgrad, local_start) -> np.ndarray:
    """Return the deformed coordinates of the cell corners of a local grid box.

    Corner ``k`` (zero based) along an axis sits at ``k + start + 0.5`` in grid
    units before the average deformation gradient ``defgrad`` maps it; each
    coordinate is then scaled by the spacing along its axis. The result has
    shape ``(3, n1 + 1, n2 + 1, n3 + 1)``.
    """
    n1, n2, n3 = (int(n) for n in shape)
    if min(n1, n2, n3) < 1:
        raise ValueError(f"grid sizes must be positive, got {tuple(shape)}")
    spacing = np.asarray(delt, dtype=float).ravel()
    start = np.asarray(local_start, dtype=float).ravel()
    grad = np.asarray(defgrad, dtype=float)
    if spacing.size != 3 or start.size != 3:
        raise ValueError("delt and local_start must each have three entries")
    if grad.size != 9:
        raise ValueError(f"defgrad must be a 3x3 tensor, got {grad.size} values")
    grad = grad.reshape(3, 3)

    axes = [
        np.arange(n + 1, dtype=float) + s + 0.5 for n, s in zip((n1, n2, n3), start)
    ]
    grid = np.stack(np.meshgrid(*axes, indexing="ij"), axis=0)
    mapped = np.einsum("ij,jxyz->ixyz", grad, grid)
    return mapped * spacing[:, None, None, None]


def _block(payload: bytes) -> bytes:
    return struct.pack("<Q", len(payload)) + payload


def _cell_major(array: np.ndarray, dtype: str) -> bytes:
    # Reversing the axes puts the first grid axis fastest and components innermost.
    return np.ascontiguousarray(array.T, dtype=dtype).tobytes()


def _time_block(time_value) -> bytes:
    return _block(struct.pack("<d", float(time_value)))


def _connectivity(n1: int, n2: int, n3: int) -> np.ndarray:
    px, py = n1 + 1, n2 + 1
    kx, ky, kz = np.meshgrid(np.arange(n1), np.arange(n2), np.arange(n3), indexing="ij")

    def pid(x, y, z):
        return x + px * (y + py * z)

    corners = np.stack(
        [
            pid(kx, ky, kz),
            pid(kx + 1, ky, kz),
            pid(kx + 1, ky + 1, kz),
            pid(kx, ky + 1, kz),
            pid(kx, ky, kz + 1),
            pid(kx + 1, ky, kz + 1),
            pid(kx + 1, ky + 1, kz + 1),
            pid(kx, ky + 1, kz + 1),
        ],
        axis=0,
    )
    return corners


def _tensor_components(tensor: np.ndarray) -> np.ndarray:
    return np.stack([tensor[i, j] for i, j in _TENSOR_ORDER], axis=0)


def _cell_payloads(fields: MicroStateFields, rank: int) -> dict[str, bytes]:
    shape = fields.phase_id.shape
    return {
        "rank": _cell_major(np.full(shape, int(rank)), "<i4"),
        "phase_id": _cell_major(fields.phase_id, "<i4"),
        "grain_id": _cell_major(fields.grain_id, "<i4"),
        "vm-strain": _cell_major(vm_field(fields.strain, "strain"), "<f8"),
        "vm-stress": _cell_major(vm_field(fields.stress, "stress"), "<f8"),
        "vm-pl-strain-rate": _cell_major(vm_field(fields.pl_strain_rate, "strain"), "<f8"),
        "vm-el-strain": _cell_major(vm_field(fields.el_strain, "strain"), "<f8"),
        "strain": _cell_major(_tensor_components(fields.strain), "<f8"),
        "stress": _cell_major(_tensor_components(fields.stress), "<f8"),
        "pl-strain-rate": _cell_major(_tensor_components(fields.pl_strain_rate), "<f8"),
        "el-strain": _cell_major(_tensor_components(fields.el_strain), "<f8"),
        "IPFColor": _cell_major(fields.ipf_colors, "u1"),
    }


def _components_attr(ncomp) -> str:
    return "" if ncomp is None else f' NumberOfComponents="{ncomp}"'


def _piece_name(step: int, rank: int) -> str:
    return f"{_NAME}_{step:05d}_{rank:05d}.vtu"


def _subdir_name(step: int) -> str:
    return f"{_NAME}_{step:05d}"


def write_pvtu_index(path, step, time_value, num_ranks) -> Path:
    """Write the parallel index file that lists the pieces of every rank."""
    step = int(step)
    num_ranks = int(num_ranks)
    if num_ranks < 1:
        raise ValueError(f"num_ranks must be positive, got {num_ranks}")

    lines = [
        _PVTU_HEADER,
        '<PUnstructuredGrid GhostLevel="1">\n',
        "<FieldData>\n",
        '<DataArray type="Float64" Name="TimeValue" NumberOfTuples="1" '
        'format="appended" offset="0"/>\n',
        "</FieldData>\n",
        "<PPoints>\n",
        '<PDataArray type="Float64" Name="Points" NumberOfComponents="3"/>\n',
        "</PPoints>\n",
        "<PPointData>\n",
        "</PPointData>\n",
        "<PCellData>\n",
    ]
    lines += [
        f'<PDataArray type="{vtk_type}" Name="{name}"{_components_attr(ncomp)}/>\n'
        for name, vtk_type, ncomp in _CELL_ARRAYS
    ]
    lines.append("</PCellData>\n")
    subdir = _subdir_name(step)
    lines += [
        f'<Piece Source="{subdir}/{_piece_name(step, rank)}"/>\n'
        for rank in range(num_ranks)
    ]
    lines += ["</PUnstructuredGrid>\n", _APPENDED_START]

    path = Path(path)
    with path.open("wb") as out:
        out.write("".join(lines).encode("ascii"))
        out.write(_time_block(time_value))
        out.write(b"\n")
        out.write(_APPENDED_END.encode("ascii"))
    return path


def write_vtu_piece(path, fields, rank, time_value) -> Path:
    """Write the unstructured-grid piece of one rank holding its cells and cell data."""
    if not isinstance(fields, MicroStateFields):
        raise TypeError("fields must be a MicroStateFields instance")
    n1, n2, n3 = fields.phase_id.shape
    num_points = (n1 + 1) * (n2 + 1) * (n3 + 1)
    num_cells = n1 * n2 * n3

    time_block = _time_block(time_value)
    points_block = _block(_cell_major(fields.points, "<f8"))
    connectivity_block = _block(_cell_major(_connectivity(n1, n2, n3), "<i4"))
    offsets = np.arange(1, num_cells + 1) * _NODES_PER_CELL
    offsets_block = _block(np.ascontiguousarray(offsets, dtype="<i4").tobytes())
    types_block = _block(np.full(num_cells, _VTK_HEXAHEDRON, dtype="<i4").tobytes())
    payloads = _cell_payloads(fields, rank)
    cell_blocks = [_block(payloads[name]) for name, _, _ in _CELL_ARRAYS]

    blocks = [time_block, points_block, connectivity_block, offsets_block, types_block]
    blocks += cell_blocks
    starts = np.concatenate(([0], np.cumsum([len(b) for b in blocks])[:-1])).tolist()
    (t_off, p_off, c_off, o_off, ty_off), cell_offs = starts[:5], starts[5:]

    lines = [
        _VTU_HEADER,
        "<UnstructuredGrid>\n",
        "<FieldData>\n",
        '<DataArray type="Float64" Name="TimeValue" NumberOfTuples="1" '
        f'format="appended" offset="{t_off}"/>\n',
        "</FieldData>\n",
        f'<Piece NumberOfPoints="{num_points}" NumberOfCells="{num_cells}">\n',
        "<Points>\n",
        '<DataArray type="Float64" Name="Points" NumberOfComponents="3" '
        f'format="appended" offset="{p_off}">\n',
        "</DataArray>\n",
        "</Points>\n",
        "<Cells>\n",
        '<DataArray type="Int32" Name="connectivity" format="appended" '
        f'offset="{c_off}"/>\n',
        f'<DataArray type="Int32" Name="offsets" format="appended" offset="{o_off}"/>\n',
        f'<DataArray type="Int32" Name="types" format="appended" offset="{ty_off}"/>\n',
        "</Cells>\n",
        "<PointData>\n",
        "</PointData>\n",
        "<CellData>\n",
    ]
    for (name, vtk_type, ncomp), offset in zip(_CELL_ARRAYS, cell_offs):
        lines.append(
            f'<DataArray type="{vtk_type}" Name="{name}"{_components_attr(ncomp)} '
            f'format="appended" offset="{offset}">\n'
        )
        lines.append("</DataArray>\n")
    lines += [
        "</CellData>\n",
        "</Piece>\n",
        "</UnstructuredGrid>\n",
        _APPENDED_START,
    ]

    path = Path(path)
    with path.open("wb") as out:
        out.write("".join(lines).encode("ascii"))
        out.writelines(blocks)
        out.write(b"\n")
        out.write(_APPENDED_END.encode("ascii"))
    return path


def write_micro_state(directory, step, tdot, fields, num_ranks, rank) -> Path:
    """Write the micro state of one step under ``directory/pvtu`` and return the piece path.

    Rank 0 also writes the index ``pvtu/MicroState_<step>.pvtu``; every rank
    writes its piece into ``pvtu/MicroState_<step>/``. The time value stored is
    ``step * tdot``.
    """
    step = int(step)
    rank = int(rank)
    num_ranks = int(num_ranks)
    if not 0 <= rank < num_ranks:
        raise ValueError(f"rank {rank} is outside 0..{num_ranks - 1}")

    pvtu_dir = Path(directory) / _PVTU_DIR
    subdir = pvtu_dir / _subdir_name(step)
    subdir.mkdir(parents=True, exist_ok=True)

    time_value = float(step) * float(tdot)
    if rank == 0:
        write_pvtu_index(pvtu_dir / f"{_NAME}_{step:05d}.pvtu", step, time_value, num_ranks)
    return write_vtu_piece(subdir / _piece_name(step, rank), fields, rank, time_value)