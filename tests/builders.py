"""Byte-level builders for xidat test inputs."""

import struct

from xidat.common.cursor import U16, U32, Cursor

IDENTITY = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


# ---- Event files ----

def build_block(series: list[bytes], exec_nums: list[int] | None = None,
                actor: int = 0x01000001, immed: list[int] | None = None,
                tag_offsets: list[int] | None = None) -> bytes:
    """One event block with 0xFF padding; tag offsets follow the series lengths."""
    exec_nums = exec_nums if exec_nums is not None else list(range(len(series)))
    immed = immed or []
    if tag_offsets is None:
        tag_offsets, pos = [], 0
        for s in series:
            tag_offsets.append(pos)
            pos += len(s)
    data = b"".join(series)

    out = bytearray()
    out += struct.pack("<II", actor, len(tag_offsets))
    out += struct.pack(f"<{len(tag_offsets)}H", *tag_offsets)
    out += struct.pack(f"<{len(exec_nums)}H", *exec_nums)
    out += struct.pack("<I", len(immed))
    out += struct.pack(f"<{len(immed)}I", *immed)
    out += struct.pack("<I", len(data))
    out += data
    out += b"\xff" * ((4 - len(data) % 4) % 4)
    return bytes(out)


def build_event_file(blocks: list[bytes]) -> bytes:
    header = struct.pack("<I", len(blocks)) + b"".join(struct.pack("<I", len(b)) for b in blocks)
    return header + b"".join(blocks)


# ---- Collision mesh ----

def build_mesh_grid(meshes: list[dict], grid_width: int = 1, grid_height: int = 1,
                    occupied=(0,), prefix: bytes = b"\x00" * 16,
                    info_entry: int = 7) -> tuple[bytes, int]:
    """Grid + one grid entry holding `meshes`, placed after `prefix`.

    Each mesh dict has matrix (16 floats), vertices/normals (lists of xyz),
    triangles (lists of four u16) and optional flags / vertex_padding.
    Returns (buffer, grid_offset).
    """
    c = Cursor()
    c.write_bytes(prefix)
    grid_offset = c.offset
    c.write_bytes(b"\x00" * 4 * grid_width * grid_height)

    entry_offset = c.offset
    for cell in occupied:
        c.write_at(grid_offset + cell * 4, U32, entry_offset)
    c.write_u32(info_entry)
    pairs_offset = c.offset
    c.write_bytes(b"\x00" * (8 * len(meshes) + 4))

    for i, mesh in enumerate(meshes):
        vis = c.offset
        for value in mesh.get("matrix", IDENTITY):
            c.write_f32(value)

        geo = c.offset
        c.write_bytes(b"\x00" * 16)

        vertex_offset = c.offset
        for point in mesh.get("vertices", []):
            for value in point:
                c.write_f32(value)
        c.write_bytes(b"\x00" * mesh.get("vertex_padding", 0))

        normal_offset = c.offset
        for point in mesh.get("normals", []):
            for value in point:
                c.write_f32(value)

        triangle_offset = c.offset
        for tri in mesh.get("triangles", []):
            for index in tri:
                c.write_u16(index)

        c.write_at(geo, U32, vertex_offset)
        c.write_at(geo + 4, U32, normal_offset)
        c.write_at(geo + 8, U32, triangle_offset)
        c.write_at(geo + 12, U16, len(mesh.get("triangles", [])))
        c.write_at(geo + 14, U16, mesh.get("flags", 0))
        c.write_at(pairs_offset + i * 8, U32, vis)
        c.write_at(pairs_offset + i * 8 + 4, U32, geo)

    return c.to_bytes(), grid_offset


ZONE_MODEL_PREFIX_SIZE = 0x3C


def build_zone_model(meshes: list[dict], grid_bytes=(1, 1), objects: int = 2) -> bytes:
    """Decrypted 0x1C chunk body: header, mesh header at 0x20, then the grid."""
    width, height = grid_bytes[0] * 10, grid_bytes[1] * 10
    prefix = bytearray()
    prefix += struct.pack("<III", 0x00000123, 0, 0x20)
    prefix += bytes([grid_bytes[0], grid_bytes[1], 2, 3])
    prefix += struct.pack("<III", 0, 0x20 + 0x64 * objects, 0x20)
    prefix += b"\xab\xcd\xef\x01"
    prefix += struct.pack("<7I", 1, 0, 0, 0, ZONE_MODEL_PREFIX_SIZE, 0, 0)
    assert len(prefix) == ZONE_MODEL_PREFIX_SIZE

    data, _ = build_mesh_grid(meshes, width, height, (0,), bytes(prefix))
    return data


# ---- Zone chunks ----

def build_chunk(tag: bytes, chunk_type: int, body: bytes,
                unknown_0x08: int = 0, unknown_0x12: int = 0) -> bytes:
    """Chunk header + body, body zero-padded to a 16-byte multiple."""
    body = body + b"\x00" * ((16 - len(body) % 16) % 16)
    packed = (((len(body) + 16) >> 4) << 7) | chunk_type
    return tag + struct.pack("<III", packed, unknown_0x08, unknown_0x12) + body


# ---- MMB ----

def build_mmb(models: list[dict], d3: int = 2, model_count: int | None = None,
              d5: int = 0xFF, d6: int = 0xFF) -> bytes:
    """Packed-header MMB with a single block located right after the header."""
    c = Cursor()
    c.write_u32(0x00001234)
    for value in (d3, 0, d5, d6):
        c.write_u8(value)
    c.write_u32(0)
    c.write_u32(0)

    c.write_bytes(b"testmmb".ljust(16, b"\x00"))
    c.write_u32(1)
    for value in (-1.0, 1.0, -2.0, 2.0, -3.0, 3.0):
        c.write_f32(value)
    c.write_u32(c.offset + 4)

    c.write_u32(len(models) if model_count is None else model_count)
    for value in (0.0, 1.0, 0.0, 1.0, 0.0, 1.0):
        c.write_f32(value)
    c.write_u32(5)

    for model in models:
        c.write_bytes(model.get("texture", b"tex").ljust(16, b"\x00"))
        vertices = model.get("vertices", [])
        c.write_u16(len(vertices))
        c.write_u16(model.get("blending", 0))
        for vertex in vertices:
            for value in vertex[:3]:
                c.write_f32(value)
            if d3 == 2:
                for value in vertex[3:6]:
                    c.write_f32(value)
            for value in (0.0, 1.0, 0.0):
                c.write_f32(value)
            c.write_u32(0xFF00FF00)
            c.write_f32(0.5)
            c.write_f32(0.25)
        indices = model.get("indices", [])
        c.write_u32(0x10000 | len(indices))
        for index in indices:
            c.write_u32(0x20000 | index)

    return c.to_bytes()
