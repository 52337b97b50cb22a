"""
Zone Chunks — container of self-delimited chunks in zone DAT files.

Every chunk starts with a 16-byte header:
    [4B tag (ASCII)] [4B packed type/length] [4B unknown] [4B unknown]

    chunk_type = packed & 0x7F
    length     = ((packed >> 7) << 4) - 16     (body bytes after the header)

Body decoding by type:
    0x1C  model   decode_1b → ZoneModel (collision mesh)
    0x2E  MMB     decode_05 → decode_swap → ZoneMmb
    other         kept as raw bytes, never decrypted

Bodies shorter than 8 bytes are always kept raw. When a sub-codec fails the
chunk degrades to raw bytes and decoding continues with the next chunk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from xidat.common.cursor import Cursor
from xidat.common.hexfmt import bytes_to_hex_list
from xidat.config import CodecConfig, DEFAULT_CONFIG
from xidat.errors import DatError, InvalidChunkLength, InvalidChunkTag, ZoneModelNotFound
from xidat.zone.ciphers import decode_05, decode_1b, decode_swap
from xidat.zone.zone_mmb import ZoneMmb
from xidat.zone.zone_model import ZoneModel

log = logging.getLogger(__name__)

CHUNK_HEADER_SIZE = 16
PACKED_MASK = 0x0FFFFFFF
MIN_DECODABLE_LENGTH = 8

CHUNK_TYPE_MODEL = 0x1C
CHUNK_TYPE_MMB = 0x2E

# Type names seen in zone files, for display only
CHUNK_TYPE_NAMES: dict[int, str] = {
    0x1C: "MZB",
    0x20: "IMG",
    0x29: "Bone",
    0x2A: "Vertex",
    0x2B: "Animation",
    0x2E: "MMB",
}


@dataclass
class UnknownChunk:
    data: bytes = b""

    def to_dict(self) -> dict:
        return {"type": "Unknown", "data": bytes_to_hex_list(self.data)}


ChunkPayload = ZoneModel | ZoneMmb | UnknownChunk


def decode_chunk_body(chunk_type: int, body: bytes, config: CodecConfig = DEFAULT_CONFIG) -> ChunkPayload:
    """Decode a chunk body by type, degrading to UnknownChunk on failure."""
    if len(body) < MIN_DECODABLE_LENGTH:
        log.info("Chunk type 0x%02X (%d bytes) too short to decode, kept raw", chunk_type, len(body))
        return UnknownChunk(bytes(body))

    try:
        if chunk_type == CHUNK_TYPE_MODEL:
            return ZoneModel.decode(decode_1b(body), config)
        if chunk_type == CHUNK_TYPE_MMB:
            return ZoneMmb.decode(decode_swap(decode_05(body)))
    except DatError as e:
        log.warning(
            "Chunk type 0x%02X (%d bytes) kept raw: %s", chunk_type, len(body), e,
        )
        return UnknownChunk(bytes(body))

    log.info("Chunk type 0x%02X (%d bytes) has no decoder, kept raw", chunk_type, len(body))
    return UnknownChunk(bytes(body))


@dataclass
class Chunk:
    tag: str
    # Header word as read; the top four bits are not part of type or length
    type_and_length: int
    unknown_0x08: int
    unknown_0x12: int
    body: bytes
    payload: ChunkPayload = field(default_factory=UnknownChunk)

    @property
    def packed(self) -> int:
        """Packed type/length with the top four bits cleared."""
        return self.type_and_length & PACKED_MASK

    @property
    def chunk_type(self) -> int:
        return self.packed & 0x7F

    @property
    def length(self) -> int:
        return ((self.packed >> 7) << 4) - CHUNK_HEADER_SIZE

    @property
    def type_name(self) -> str:
        return CHUNK_TYPE_NAMES.get(self.chunk_type, f"0x{self.chunk_type:02X}")

    @property
    def is_decoded(self) -> bool:
        return not isinstance(self.payload, UnknownChunk)

    @classmethod
    def decode(cls, cursor: Cursor, config: CodecConfig = DEFAULT_CONFIG) -> Chunk:
        start = cursor.offset
        raw_tag = cursor.take(4)
        try:
            tag = raw_tag.decode("ascii")
        except UnicodeDecodeError:
            raise InvalidChunkTag(f"Chunk at 0x{start:X} has non-text tag {raw_tag.hex()}") from None

        type_and_length = cursor.u32()
        unknown_0x08 = cursor.u32()
        unknown_0x12 = cursor.u32()

        packed = type_and_length & PACKED_MASK
        length = ((packed >> 7) << 4) - CHUNK_HEADER_SIZE
        if length < 0:
            raise InvalidChunkLength(
                f"Chunk '{tag}' at 0x{start:X} declares length {length}"
            )
        body = cursor.take(length)

        chunk_type = packed & 0x7F
        log.debug("Chunk '%s' type 0x%02X, %d bytes at 0x%X", tag, chunk_type, length, start)

        return cls(
            tag=tag,
            type_and_length=type_and_length,
            unknown_0x08=unknown_0x08,
            unknown_0x12=unknown_0x12,
            body=body,
            payload=decode_chunk_body(chunk_type, body, config),
        )

    def encode(self, cursor: Cursor) -> None:
        cursor.write_bytes(self.tag.encode("ascii"))
        cursor.write_u32(self.type_and_length)
        cursor.write_u32(self.unknown_0x08)
        cursor.write_u32(self.unknown_0x12)
        cursor.write_bytes(self.body)

    def to_dict(self) -> dict:
        if isinstance(self.payload, ZoneModel):
            data = {"type": "ZoneModel", "zone_model": self.payload.to_dict()}
        elif isinstance(self.payload, ZoneMmb):
            data = {"type": "ZoneMmb", "zone_mmb": self.payload.to_dict()}
        else:
            data = self.payload.to_dict()
        return {
            "tag": self.tag,
            "chunk_type": self.chunk_type,
            "unknown_0x08": self.unknown_0x08,
            "unknown_0x12": self.unknown_0x12,
            "data": data,
        }


@dataclass
class ZoneData:
    chunks: list[Chunk] = field(default_factory=list)

    @classmethod
    def decode(cls, data: bytes, config: CodecConfig = DEFAULT_CONFIG) -> ZoneData:
        cursor = Cursor(data)
        chunks = []
        while cursor.remaining() > 0:
            chunks.append(Chunk.decode(cursor, config))
        log.info(
            "Decoded %d chunks (%d models, %d MMB)",
            len(chunks),
            sum(isinstance(c.payload, ZoneModel) for c in chunks),
            sum(isinstance(c.payload, ZoneMmb) for c in chunks),
        )
        return cls(chunks=chunks)

    @classmethod
    def from_path(cls, path: str | Path, config: CodecConfig = DEFAULT_CONFIG) -> ZoneData:
        return cls.decode(Path(path).read_bytes(), config)

    def encode(self) -> bytes:
        cursor = Cursor()
        for chunk in self.chunks:
            chunk.encode(cursor)
        return cursor.to_bytes()

    def zone_model(self) -> ZoneModel:
        for chunk in self.chunks:
            if isinstance(chunk.payload, ZoneModel):
                return chunk.payload
        raise ZoneModelNotFound(f"No decoded zone model among {len(self.chunks)} chunks")

    def to_dict(self) -> dict:
        return {"chunks": [c.to_dict() for c in self.chunks]}
