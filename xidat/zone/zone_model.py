"""
Zone Model — header of a decrypted type 0x1C chunk.

    0x00 u32 len_and_type
    0x04 u32 node_count_and_unk
    0x08 u32 mesh_offset
    0x0C u8  grid_width / 10, u8 grid_height / 10, u8 bucket_width, u8 bucket_height
    0x10 u32 quadtree_offset
    0x14 u32 objects_end_offset   (objects are 0x64 bytes each from 0x20)
    0x18 u32 shortname_offset     (0x4C bytes each, up to mesh_offset)
    0x1C ... opaque until mesh_offset
    mesh_offset:
         u32 mesh_model_count, u32 mesh_model_data,
         u32 mesh_grid_bucket_lists_count, u32 mesh_grid_bucket_lists,
         u32 grid_offset, u32 map_id_list_offset, u32 map_id_list_count

The grid fields feed CollisionMesh.decode().
"""

from __future__ import annotations

from dataclasses import dataclass, field

from xidat.common.cursor import Cursor
from xidat.common.hexfmt import bytes_to_hex_list
from xidat.config import CodecConfig, DEFAULT_CONFIG
from xidat.errors import ZoneModelError
from xidat.zone.collision_mesh import CollisionMesh

HEADER_SIZE = 0x1C
OBJECTS_START = 0x20
OBJECT_SIZE = 0x64
SHORTNAME_SIZE = 0x4C
GRID_SCALE = 10


@dataclass
class ZoneModel:
    data_len: int = 0
    len_and_type: int = 0
    node_count_and_unk: int = 0
    mesh_offset: int = 0
    grid_width: int = 0
    grid_height: int = 0
    bucket_width: int = 0
    bucket_height: int = 0
    quadtree_offset: int = 0
    objects_end_offset: int = 0
    shortname_offset: int = 0
    unknown_data: bytes = b""
    mesh_model_count: int = 0
    mesh_model_data: int = 0
    mesh_grid_bucket_lists_count: int = 0
    mesh_grid_bucket_lists: int = 0
    grid_offset: int = 0
    map_id_list_offset: int = 0
    map_id_list_count: int = 0
    collision_mesh: CollisionMesh = field(default_factory=CollisionMesh)

    @property
    def object_count(self) -> int:
        return max(0, self.objects_end_offset - OBJECTS_START) // OBJECT_SIZE

    @property
    def shortname_count(self) -> int:
        return max(0, self.mesh_offset - self.shortname_offset) // SHORTNAME_SIZE

    @classmethod
    def decode(cls, data: bytes, config: CodecConfig = DEFAULT_CONFIG) -> ZoneModel:
        cursor = Cursor(data)
        data_len = len(cursor)

        len_and_type = cursor.u32()
        node_count_and_unk = cursor.u32()
        mesh_offset = cursor.u32()
        if mesh_offset >= data_len or mesh_offset < HEADER_SIZE:
            raise ZoneModelError(
                f"Invalid mesh offset found: {mesh_offset}, expecting "
                f"{HEADER_SIZE} <= offset < {data_len}"
            )

        grid_width = cursor.u8() * GRID_SCALE
        grid_height = cursor.u8() * GRID_SCALE
        bucket_width = cursor.u8()
        bucket_height = cursor.u8()
        quadtree_offset = cursor.u32()
        objects_end_offset = cursor.u32()
        shortname_offset = cursor.u32()
        unknown_data = cursor.take(mesh_offset - cursor.offset)

        mesh_model_count = cursor.u32()
        mesh_model_data = cursor.u32()
        mesh_grid_bucket_lists_count = cursor.u32()
        mesh_grid_bucket_lists = cursor.u32()
        grid_offset = cursor.u32()
        map_id_list_offset = cursor.u32()
        map_id_list_count = cursor.u32()

        collision_mesh = CollisionMesh.decode(cursor, grid_offset, grid_width, grid_height, config)

        return cls(
            data_len=data_len,
            len_and_type=len_and_type,
            node_count_and_unk=node_count_and_unk,
            mesh_offset=mesh_offset,
            grid_width=grid_width,
            grid_height=grid_height,
            bucket_width=bucket_width,
            bucket_height=bucket_height,
            quadtree_offset=quadtree_offset,
            objects_end_offset=objects_end_offset,
            shortname_offset=shortname_offset,
            unknown_data=unknown_data,
            mesh_model_count=mesh_model_count,
            mesh_model_data=mesh_model_data,
            mesh_grid_bucket_lists_count=mesh_grid_bucket_lists_count,
            mesh_grid_bucket_lists=mesh_grid_bucket_lists,
            grid_offset=grid_offset,
            map_id_list_offset=map_id_list_offset,
            map_id_list_count=map_id_list_count,
            collision_mesh=collision_mesh,
        )

    def to_dict(self) -> dict:
        return {
            "data_len": self.data_len,
            "len_and_type": self.len_and_type,
            "node_count_and_unk": self.node_count_and_unk,
            "mesh_offset": self.mesh_offset,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "bucket_width": self.bucket_width,
            "bucket_height": self.bucket_height,
            "quadtree_offset": self.quadtree_offset,
            "objects_end_offset": self.objects_end_offset,
            "shortname_offset": self.shortname_offset,
            "unknown_data": bytes_to_hex_list(self.unknown_data),
            "mesh_model_count": self.mesh_model_count,
            "mesh_model_data": self.mesh_model_data,
            "mesh_grid_bucket_lists_count": self.mesh_grid_bucket_lists_count,
            "mesh_grid_bucket_lists": self.mesh_grid_bucket_lists,
            "grid_offset": self.grid_offset,
            "map_id_list_offset": self.map_id_list_offset,
            "map_id_list_count": self.map_id_list_count,
            "collision_mesh": self.collision_mesh.to_dict(),
        }
