"""
Zone data — chunk container plus the codecs for its decodable chunk types.

Components:
    chunks.py          — chunk framing, dispatch by type, re-emit
    ciphers.py         — the three body obfuscation transforms
    key_table.py       — 256-entry key table shared by the ciphers
    zone_model.py      — header of model (0x1C) chunks
    collision_mesh.py  — collision grid inside a zone model
    zone_mmb.py        — static vertex models (0x2E chunks)
"""

from .chunks import ZoneData, Chunk, UnknownChunk, decode_chunk_body
from .ciphers import decode_1b, decode_05, decode_swap
from .collision_mesh import CollisionMesh, GridEntry, MeshEntry, Point3D, Triangle
from .zone_model import ZoneModel
from .zone_mmb import ZoneMmb, DrawType

__all__ = [
    "ZoneData", "Chunk", "UnknownChunk", "decode_chunk_body",
    "decode_1b", "decode_05", "decode_swap",
    "CollisionMesh", "GridEntry", "MeshEntry", "Point3D", "Triangle",
    "ZoneModel", "ZoneMmb", "DrawType",
]
