"""
Collision Mesh — grid of transformed collision meshes inside a zone model.

Layout (offsets are absolute within the decrypted chunk body):
    grid_offset → u32 cell[grid_height][grid_width]   (0 = empty cell)
    cell        → u32 info, then (u32 vis_offset, u32 geo_offset) pairs
                  terminated by a zero in either slot
    vis_offset  → f32 matrix[4][4], row-major
    geo_offset  → u32 vertex_offset, u32 normal_offset, u32 triangle_offset,
                  u16 triangle_count, u16 flags

Vertex and normal counts are not stored: they follow from the gaps between
the three array offsets (12 bytes per point). Vertices are transformed by
the matrix with Y negated; normals only get Y negated. Triangles are four
u16 indices whose top two bits are flags. Winding is reversed when the
matrix mirrors (positive 3x3 determinant).

Arithmetic is float32, in the same order the client uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from xidat.common.cursor import Cursor
from xidat.config import CodecConfig, DEFAULT_CONFIG
from xidat.errors import CollisionMeshError

log = logging.getLogger(__name__)

POINT_SIZE = 12
TRIANGLE_SIZE = 8
INDEX_MASK = 0x3FFF


@dataclass
class Point3D:
    x: float
    y: float
    z: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass
class Triangle:
    v1: int
    v2: int
    v3: int
    normal: int

    def to_dict(self) -> dict:
        return {"v1": self.v1, "v2": self.v2, "v3": self.v3, "normal": self.normal}


@dataclass
class MeshEntry:
    flags: int = 0
    vertices: list[Point3D] = field(default_factory=list)
    normals: list[Point3D] = field(default_factory=list)
    triangles: list[Triangle] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "flags": self.flags,
            "vertices": [v.to_dict() for v in self.vertices],
            "normals": [n.to_dict() for n in self.normals],
            "triangles": [t.to_dict() for t in self.triangles],
        }


@dataclass
class GridEntry:
    info_entry: int = 0
    mesh_entries: list[MeshEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "info_entry": self.info_entry,
            "mesh_entries": [m.to_dict() for m in self.mesh_entries],
        }


def determinant3(matrix: np.ndarray) -> np.float32:
    """Determinant of the upper-left 3x3 of a float32 4x4 matrix."""
    m = matrix
    return (
        m[0, 0] * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
        + m[0, 1] * (m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2])
        + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
    )


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply the mesh matrix (row vectors, translation in row 3), negating Y."""
    m = matrix
    x, y, z = points[:, 0], points[:, 1], points[:, 2]
    out = np.empty_like(points)
    out[:, 0] = m[0, 0] * x + m[1, 0] * y + m[2, 0] * z + m[3, 0]
    out[:, 1] = -(m[0, 1] * x + m[1, 1] * y + m[2, 1] * z + m[3, 1])
    out[:, 2] = m[0, 2] * x + m[1, 2] * y + m[2, 2] * z + m[3, 2]
    return out


def _to_points(array: np.ndarray) -> list[Point3D]:
    return [Point3D(float(x), float(y), float(z)) for x, y, z in array]


@dataclass
class CollisionMesh:
    grid_entries: list[GridEntry] = field(default_factory=list)

    @classmethod
    def decode(
        cls,
        cursor: Cursor,
        grid_offset: int,
        grid_width: int,
        grid_height: int,
        config: CodecConfig = DEFAULT_CONFIG,
    ) -> CollisionMesh:
        grid_entries = []
        for entry_offset in cls._cell_entries(cursor, grid_offset, grid_width, grid_height):
            grid_entries.append(cls._decode_grid_entry(cursor, entry_offset, config))
        return cls(grid_entries=grid_entries)

    @staticmethod
    def _cell_entries(
        cursor: Cursor, grid_offset: int, grid_width: int, grid_height: int,
    ) -> Iterator[int]:
        """Entry offsets of the occupied cells, row-major.

        Scanning stops at the first cell header past the end of the buffer.
        """
        for y in range(grid_height):
            for x in range(grid_width):
                header_offset = grid_offset + (y * grid_width + x) * 4
                if header_offset + 4 > len(cursor):
                    return
                entry_offset = cursor.u32_at(header_offset)
                if entry_offset == 0 or entry_offset >= len(cursor):
                    continue
                yield entry_offset

    @classmethod
    def _decode_grid_entry(cls, cursor: Cursor, entry_offset: int, config: CodecConfig) -> GridEntry:
        cursor.goto(entry_offset)
        info_entry = cursor.u32()

        pairs = []
        while True:
            vis_offset = cursor.u32()
            if vis_offset == 0:
                break
            geo_offset = cursor.u32()
            if geo_offset == 0:
                break
            pairs.append((vis_offset, geo_offset))

        return GridEntry(
            info_entry=info_entry,
            mesh_entries=[cls._decode_mesh(cursor, vis, geo, config) for vis, geo in pairs],
        )

    @staticmethod
    def _check_position(cursor: Cursor, expected: int, what: str, config: CodecConfig) -> None:
        if cursor.offset == expected:
            return
        message = f"{what} ended at 0x{cursor.offset:X}, expected 0x{expected:X}"
        if config.strict_mesh_offsets:
            raise CollisionMeshError(message)
        log.warning("Collision mesh: %s", message)

    @classmethod
    def _decode_mesh(cls, cursor: Cursor, vis_offset: int, geo_offset: int, config: CodecConfig) -> MeshEntry:
        cursor.goto(vis_offset)
        matrix = np.frombuffer(cursor.take(64), dtype="<f4").reshape(4, 4)

        cursor.goto(geo_offset)
        vertex_offset = cursor.u32()
        normal_offset = cursor.u32()
        triangle_offset = cursor.u32()
        triangle_count = cursor.u16()
        flags = cursor.u16()

        if normal_offset < vertex_offset or triangle_offset < normal_offset:
            raise CollisionMeshError(
                f"Mesh array offsets out of order: vertices 0x{vertex_offset:X}, "
                f"normals 0x{normal_offset:X}, triangles 0x{triangle_offset:X}"
            )
        vertex_count = (normal_offset - vertex_offset) // POINT_SIZE
        normal_count = (triangle_offset - normal_offset) // POINT_SIZE

        cursor.goto(vertex_offset)
        raw_vertices = np.frombuffer(cursor.take(vertex_count * POINT_SIZE), dtype="<f4").reshape(-1, 3)
        vertices = transform_points(matrix, raw_vertices)
        cls._check_position(cursor, normal_offset, "vertex array", config)

        cursor.goto(normal_offset)
        normals = np.frombuffer(cursor.take(normal_count * POINT_SIZE), dtype="<f4").reshape(-1, 3).copy()
        normals[:, 1] = -normals[:, 1]
        cls._check_position(cursor, triangle_offset, "normal array", config)

        cursor.goto(triangle_offset)
        indices = np.frombuffer(cursor.take(triangle_count * TRIANGLE_SIZE), dtype="<u2").reshape(-1, 4)
        indices = indices & INDEX_MASK

        # Mirrored transforms flip the face direction
        flip = determinant3(matrix) > 0
        triangles = []
        for v1, v2, v3, n in indices.tolist():
            if flip:
                triangles.append(Triangle(v3, v2, v1, n))
            else:
                triangles.append(Triangle(v1, v2, v3, n))

        return MeshEntry(
            flags=flags,
            vertices=_to_points(vertices),
            normals=_to_points(normals),
            triangles=triangles,
        )

    @property
    def mesh_count(self) -> int:
        return sum(len(g.mesh_entries) for g in self.grid_entries)

    @property
    def triangle_count(self) -> int:
        return sum(len(m.triangles) for g in self.grid_entries for m in g.mesh_entries)

    def to_dict(self) -> dict:
        return {"grid_entries": [g.to_dict() for g in self.grid_entries]}
