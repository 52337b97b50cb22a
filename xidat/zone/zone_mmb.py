"""
Zone MMB — static vertex models from type 0x2E chunks.

    top header   "MMB" magic + 3 u32, or a packed u32 (24-bit length,
                 d1 in the top byte) followed by d3..d6 and two u32
    header       img_id[16], u32 pieces, f32 bbox[6], u32 offset_block_header
    offsets      up to 8 u32 block offsets (zero entries unused)
    block        u32 model_count, f32 bbox[6], u32 face_id, then per model:
                 texture[16], u16 vertex_count, u16 blending, vertices,
                 u32 index_count, u32 indices[index_count] (low 16 bits)

Vertices carry an extra direction vector when the packed header has
d3 == 2; the same flag selects triangle lists over strips.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from xidat.common.cursor import Cursor
from xidat.common.hexfmt import bytes_to_hex_list
from xidat.errors import MmbError

log = logging.getLogger(__name__)

MMB_MAGIC = b"MMB"
MAX_BLOCK_OFFSETS = 8
MAX_MODELS_PER_BLOCK = 50


class DrawType(Enum):
    TRIANGLE_LIST = "triangle_list"
    TRIANGLE_STRIP = "triangle_strip"


# ---- Top headers ----

@dataclass
class MmbMagicHeader:
    """Top header of files that start with the "MMB" magic."""
    first_u32: int
    second_u32: int
    third_u32: int

    @property
    def mmb_type(self) -> int:
        return self.first_u32 & 0x7F

    @property
    def next(self) -> int:
        return self.first_u32 & 0x3FFFFFF

    @property
    def size(self) -> int:
        return self.next * 16

    @property
    def has_d_values(self) -> bool:
        return False

    @property
    def has_triangle_list(self) -> bool:
        return self.mmb_type == 0

    def to_dict(self) -> dict:
        return {
            "kind": "magic",
            "mmb_type": self.mmb_type,
            "next": self.next,
            "first_u32": self.first_u32,
            "second_u32": self.second_u32,
            "third_u32": self.third_u32,
        }


@dataclass
class MmbPackedHeader:
    """Top header of decrypted chunk bodies (packed length word)."""
    first_u32: int
    d3: int
    d4: int
    d5: int
    d6: int
    unknown_0x08: int
    unknown_0x12: int

    @property
    def len(self) -> int:
        return self.first_u32 & 0xFFFFFF

    @property
    def d1(self) -> int:
        return (self.first_u32 >> 24) & 0xFF

    @property
    def size(self) -> int:
        return self.len

    @property
    def has_d_values(self) -> bool:
        return self.d3 == 2

    @property
    def has_triangle_list(self) -> bool:
        return self.d3 == 2

    def to_dict(self) -> dict:
        return {
            "kind": "packed",
            "len": self.len,
            "d1": self.d1,
            "d3": self.d3,
            "d4": self.d4,
            "d5": self.d5,
            "d6": self.d6,
            "unknown_0x08": self.unknown_0x08,
            "unknown_0x12": self.unknown_0x12,
        }


# ---- Body ----

@dataclass
class BoundingBox:
    x1: float
    x2: float
    y1: float
    y2: float
    z1: float
    z2: float

    @classmethod
    def decode(cls, cursor: Cursor) -> BoundingBox:
        return cls(*(cursor.f32() for _ in range(6)))

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class MmbHeader:
    img_id: bytes
    pieces: int
    bbox: BoundingBox
    offset_block_header: int

    def to_dict(self) -> dict:
        return {
            "img_id": self.img_id.rstrip(b"\x00").decode("ascii", "replace"),
            "pieces": self.pieces,
            "bbox": self.bbox.to_dict(),
            "offset_block_header": self.offset_block_header,
        }


@dataclass
class MmbVertex:
    x: float
    y: float
    z: float
    dx: float
    dy: float
    dz: float
    hx: float
    hy: float
    hz: float
    color: int
    u: float
    v: float

    @classmethod
    def decode(cls, cursor: Cursor, with_d: bool) -> MmbVertex:
        x, y, z = cursor.f32(), cursor.f32(), cursor.f32()
        if with_d:
            dx, dy, dz = cursor.f32(), cursor.f32(), cursor.f32()
        else:
            dx = dy = dz = 0.0
        hx, hy, hz = cursor.f32(), cursor.f32(), cursor.f32()
        color = cursor.u32()
        u, v = cursor.f32(), cursor.f32()
        return cls(x, y, z, dx, dy, dz, hx, hy, hz, color, u, v)

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class MmbModel:
    draw_type: DrawType
    texture_name: bytes
    blending: int
    vertices: list[MmbVertex] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def index_count(self) -> int:
        return len(self.indices)

    @property
    def texture(self) -> str:
        return self.texture_name.rstrip(b"\x00").decode("ascii", "replace")

    def to_dict(self) -> dict:
        return {
            "draw_type": self.draw_type.value,
            "texture_name": self.texture,
            "texture_name_raw": bytes_to_hex_list(self.texture_name),
            "blending": self.blending,
            "vertex_count": self.vertex_count,
            "vertices": [v.to_dict() for v in self.vertices],
            "index_count": self.index_count,
            "indices": list(self.indices),
        }


@dataclass
class MmbBlock:
    bbox: BoundingBox
    face_id: int
    models: list[MmbModel] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "bbox": self.bbox.to_dict(),
            "face_id": self.face_id,
            "models": [m.to_dict() for m in self.models],
        }


@dataclass
class ZoneMmb:
    data_len: int
    top_header: MmbMagicHeader | MmbPackedHeader
    header: MmbHeader
    blocks: list[MmbBlock] = field(default_factory=list)

    @classmethod
    def decode(cls, data: bytes) -> ZoneMmb:
        cursor = Cursor(data)
        top_header = cls._decode_top_header(cursor)
        header = MmbHeader(
            img_id=cursor.take(16),
            pieces=cursor.u32(),
            bbox=BoundingBox.decode(cursor),
            offset_block_header=cursor.u32(),
        )

        blocks = []
        for offset in cls._block_offsets(cursor, header):
            cursor.goto(offset)
            blocks.append(cls._decode_block(cursor, top_header))

        return cls(data_len=len(cursor), top_header=top_header, header=header, blocks=blocks)

    @staticmethod
    def _decode_top_header(cursor: Cursor) -> MmbMagicHeader | MmbPackedHeader:
        if cursor.peek(3) == MMB_MAGIC:
            cursor.skip(3)
            return MmbMagicHeader(cursor.u32(), cursor.u32(), cursor.u32())
        return MmbPackedHeader(
            first_u32=cursor.u32(),
            d3=cursor.u8(),
            d4=cursor.u8(),
            d5=cursor.u8(),
            d6=cursor.u8(),
            unknown_0x08=cursor.u32(),
            unknown_0x12=cursor.u32(),
        )

    @staticmethod
    def _read_offset_list(cursor: Cursor) -> list[int]:
        offsets = [cursor.u32() for _ in range(MAX_BLOCK_OFFSETS)]
        return [o for o in offsets if o != 0]

    @classmethod
    def _block_offsets(cls, cursor: Cursor, header: MmbHeader) -> list[int]:
        current_offset = cursor.offset
        if header.offset_block_header == 0:
            if header.pieces != 0:
                return cls._read_offset_list(cursor)
            return [current_offset]

        offsets = [header.offset_block_header]
        if header.offset_block_header != current_offset:
            offsets.extend(cls._read_offset_list(cursor))
            if len(offsets) != header.pieces:
                raise MmbError(
                    f"Mismatched offsets: {len(offsets)} found, header lists {header.pieces} pieces"
                )
        return offsets

    @staticmethod
    def _decode_block(cursor: Cursor, top_header: MmbMagicHeader | MmbPackedHeader) -> MmbBlock:
        model_count = cursor.u32()
        bbox = BoundingBox.decode(cursor)
        face_id = cursor.u32()
        log.debug("MMB block at 0x%X: %d models, face %d", cursor.offset, model_count, face_id)
        if model_count > MAX_MODELS_PER_BLOCK:
            raise MmbError(f"Corrupt MMB model count: {model_count}")

        draw_type = DrawType.TRIANGLE_LIST if top_header.has_triangle_list else DrawType.TRIANGLE_STRIP
        models = []
        for _ in range(model_count):
            texture_name = cursor.take(16)
            vertex_count = cursor.u16()
            blending = cursor.u16()
            vertices = [MmbVertex.decode(cursor, top_header.has_d_values) for _ in range(vertex_count)]
            index_count = cursor.u32() & 0xFFFF
            indices = [cursor.u32() & 0xFFFF for _ in range(index_count)]
            models.append(MmbModel(draw_type, texture_name, blending, vertices, indices))

        return MmbBlock(bbox=bbox, face_id=face_id, models=models)

    @property
    def model_count(self) -> int:
        return sum(len(b.models) for b in self.blocks)

    def to_dict(self) -> dict:
        return {
            "data_len": self.data_len,
            "top_header": self.top_header.to_dict(),
            "header": self.header.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }
