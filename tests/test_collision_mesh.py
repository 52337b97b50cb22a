"""Tests for collision mesh decoding."""

import logging
import struct

import numpy as np
import pytest

from builders import build_mesh_grid
from xidat.common.cursor import Cursor
from xidat.config import CodecConfig
from xidat.errors import CollisionMeshError
from xidat.zone.collision_mesh import CollisionMesh, Point3D, Triangle, determinant3, transform_points

FLAT = (
    0.0, 0.0, 0.0, 0.0,
    0.0, 0.0, 0.0, 0.0,
    0.0, 0.0, 0.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)

FLIP_Y = (
    1.0, 0.0, 0.0, 0.0,
    0.0, -1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


def _decode(buf: bytes, grid_offset: int, width: int = 1, height: int = 1, config=None) -> CollisionMesh:
    return CollisionMesh.decode(Cursor(buf), grid_offset, width, height, config or CodecConfig())


class TestMath:
    def test_determinant(self):
        m = np.array(FLIP_Y, dtype="<f4").reshape(4, 4)
        assert determinant3(m) == -1.0
        assert determinant3(np.zeros((4, 4), dtype="<f4")) == 0.0

    def test_transform_negates_y(self):
        m = np.eye(4, dtype="<f4")
        m[3, :3] = (1.0, 2.0, 3.0)
        points = np.array([[1.0, 1.0, 1.0]], dtype="<f4")
        out = transform_points(m, points)
        assert out.dtype == np.float32
        assert out.tolist() == [[2.0, -3.0, 4.0]]


class TestMeshDecode:
    def test_transformed_mesh(self, mirrored_mesh):
        buf, grid_offset = build_mesh_grid([mirrored_mesh])
        mesh = _decode(buf, grid_offset)

        assert len(mesh.grid_entries) == 1
        entry = mesh.grid_entries[0]
        assert entry.info_entry == 7
        assert len(entry.mesh_entries) == 1

        m = entry.mesh_entries[0]
        assert m.flags == 0x0102
        assert m.vertices == [
            Point3D(11.0, -22.0, 33.0),
            Point3D(9.0, -20.5, 30.0),
            Point3D(10.0, -20.0, 34.0),
        ]
        assert m.normals == [Point3D(0.0, -1.0, 0.0)]

    def test_positive_determinant_reverses_winding(self, mirrored_mesh):
        buf, grid_offset = build_mesh_grid([mirrored_mesh])
        tri = _decode(buf, grid_offset).grid_entries[0].mesh_entries[0].triangles
        assert tri == [Triangle(2, 1, 0, 0)]

    def test_negative_determinant_keeps_winding(self, mirrored_mesh):
        mesh = dict(mirrored_mesh, matrix=FLIP_Y)
        buf, grid_offset = build_mesh_grid([mesh])
        tri = _decode(buf, grid_offset).grid_entries[0].mesh_entries[0].triangles
        assert tri == [Triangle(0, 1, 2, 0)]

    def test_zero_determinant_keeps_winding(self):
        mesh = {
            "matrix": FLAT,
            "vertices": [(1.0, 2.0, 3.0)],
            "normals": [],
            "triangles": [(0, 0, 0, 0), (1, 2, 3, 4)],
        }
        buf, grid_offset = build_mesh_grid([mesh])
        m = _decode(buf, grid_offset).grid_entries[0].mesh_entries[0]
        assert m.triangles == [Triangle(0, 0, 0, 0), Triangle(1, 2, 3, 4)]
        assert m.vertices[0].x == 0.0
        assert m.vertices[0].z == 0.0

    def test_indices_masked_to_14_bits(self):
        mesh = {
            "matrix": FLAT,
            "vertices": [],
            "normals": [],
            "triangles": [(0xC001, 0x4002, 0x8003, 0xFFFF)],
        }
        buf, grid_offset = build_mesh_grid([mesh])
        m = _decode(buf, grid_offset).grid_entries[0].mesh_entries[0]
        assert m.triangles == [Triangle(1, 2, 3, 0x3FFF)]

    def test_several_meshes_per_entry(self, mirrored_mesh):
        second = dict(mirrored_mesh, vertices=[(0.0, 0.0, 0.0)], flags=9)
        buf, grid_offset = build_mesh_grid([mirrored_mesh, second])
        mesh = _decode(buf, grid_offset)
        entries = mesh.grid_entries[0].mesh_entries
        assert [e.flags for e in entries] == [0x0102, 9]
        assert mesh.mesh_count == 2
        assert mesh.triangle_count == 2


class TestGridScan:
    def test_row_major_occupied_cells(self, mirrored_mesh):
        buf, grid_offset = build_mesh_grid([mirrored_mesh], grid_width=2, grid_height=2, occupied=(0, 3))
        mesh = _decode(buf, grid_offset, 2, 2)
        assert len(mesh.grid_entries) == 2

    def test_stops_at_buffer_end(self):
        buf = bytes(8)
        mesh = _decode(buf, grid_offset=4, width=5, height=3)
        assert mesh.grid_entries == []

    def test_skips_out_of_range_entries(self):
        buf = struct.pack("<III", 0, 0xFFFF0000, 0)
        mesh = _decode(buf, grid_offset=0, width=3, height=1)
        assert mesh.grid_entries == []

    def test_empty_grid(self):
        assert _decode(bytes(16), grid_offset=0, width=0, height=0).grid_entries == []


class TestOffsetChecks:
    def test_strict_mismatch_raises(self, mirrored_mesh):
        mesh = dict(mirrored_mesh, vertex_padding=4)
        buf, grid_offset = build_mesh_grid([mesh])
        with pytest.raises(CollisionMeshError):
            _decode(buf, grid_offset)

    def test_lenient_mismatch_logs(self, mirrored_mesh, caplog):
        mesh = dict(mirrored_mesh, vertex_padding=4)
        buf, grid_offset = build_mesh_grid([mesh])
        with caplog.at_level(logging.WARNING, logger="xidat.zone.collision_mesh"):
            result = _decode(buf, grid_offset, config=CodecConfig(strict_mesh_offsets=False))
        m = result.grid_entries[0].mesh_entries[0]
        assert len(m.vertices) == 3
        assert m.normals == [Point3D(0.0, -1.0, 0.0)]
        assert "vertex array" in caplog.text

    def test_out_of_order_offsets(self, mirrored_mesh):
        buf, grid_offset = build_mesh_grid([mirrored_mesh])
        c = Cursor(buf)
        entry = c.u32_at(grid_offset)
        geo = c.u32_at(entry + 8)
        vertex_offset = c.u32_at(geo)
        patched = bytearray(buf)
        patched[geo + 4:geo + 8] = struct.pack("<I", vertex_offset - 12)
        with pytest.raises(CollisionMeshError):
            _decode(bytes(patched), grid_offset)

    def test_to_dict(self, mirrored_mesh):
        buf, grid_offset = build_mesh_grid([mirrored_mesh])
        d = _decode(buf, grid_offset).to_dict()
        mesh = d["grid_entries"][0]["mesh_entries"][0]
        assert mesh["vertices"][0] == {"x": 11.0, "y": -22.0, "z": 33.0}
        assert mesh["triangles"][0] == {"v1": 2, "v2": 1, "v3": 0, "normal": 0}
