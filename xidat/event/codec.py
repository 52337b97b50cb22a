"""
Event DAT codec — header, per-entity blocks and instruction series.

File layout (all little-endian):
    u32 block_count, u32 block_sizes[block_count]
    per block:
        u32 actor_number            (0x7FFFFFFF = player/zone events)
        u32 tag_count
        u16 tag_offsets[tag_count]  (into this block's instruction stream)
        u16 event_exec_nums[tag_count]
        u32 immed_count, u32 immed_data[immed_count]
        u32 event_data_size, u8 event_data[event_data_size]
        0xFF padding to a 4-byte boundary

Each tag starts one series of instructions. Stream bytes ahead of the first
tag (all of them when a block has no tags) are kept as the block prologue
and written back in front of the series. Instruction lengths are
ambiguous for many opcodes, see opcodes.resolve_size(). When a single
instruction can't be sized with confidence the whole series is kept as
RawBytes: a wrong length desynchronizes everything after it.

Based on atom0s' notes on the event DAT structures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from xidat.common.cursor import Cursor
from xidat.common.hexfmt import bytes_to_hex_list, hex_byte, hex_list_to_bytes, parse_hex_byte
from xidat.config import CodecConfig, DEFAULT_CONFIG
from xidat.errors import (
    DatError, InvalidBlockCount, InvalidBlockSize, InvalidEventDataSize, InvalidSeriesBounds,
)
from xidat.event.opcodes import EMPTY_OPCODE, EventOpcode, get_opcode, resolve_size

log = logging.getLogger(__name__)

PLAYER_ACTOR = 0x7FFFFFFF
PAD_BYTE = 0xFF


def _padding(size: int) -> int:
    return (4 - size % 4) % 4


@dataclass
class RawBytes:
    """Series bytes that could not be split into instructions."""
    data: bytes = b""

    def __len__(self) -> int:
        return len(self.data)


# ---- Series ----

@dataclass
class EventSeries:
    """Instructions belonging to one event tag."""
    id: int
    payload: list[EventOpcode] | RawBytes = field(default_factory=RawBytes)

    @property
    def is_raw(self) -> bool:
        return isinstance(self.payload, RawBytes)

    @property
    def opcodes(self) -> list[EventOpcode]:
        return [] if self.is_raw else self.payload

    def to_bytes(self) -> bytes:
        if isinstance(self.payload, RawBytes):
            return self.payload.data
        return b"".join(op.to_bytes() for op in self.payload)

    @property
    def size(self) -> int:
        return len(self.to_bytes())

    def to_dict(self) -> dict:
        if isinstance(self.payload, RawBytes):
            return {"id": self.id, "raw": bytes_to_hex_list(self.payload.data)}
        return {
            "id": self.id,
            "opcodes": [
                {"opcode": hex_byte(op.opcode), "params": bytes_to_hex_list(op.params)}
                for op in self.payload
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> EventSeries:
        if "raw" in data:
            return cls(id=data["id"], payload=RawBytes(hex_list_to_bytes(data["raw"])))
        return cls(
            id=data["id"],
            payload=[
                EventOpcode(parse_hex_byte(op["opcode"]), hex_list_to_bytes(op.get("params", [])))
                for op in data.get("opcodes", [])
            ],
        )


def decode_instructions(
    segment: bytes,
    config: CodecConfig = DEFAULT_CONFIG,
) -> tuple[list[EventOpcode] | None, str]:
    """Split one series into instructions.

    Returns (opcodes, "") on success or (None, reason) when any instruction
    can't be decoded with confidence.
    """
    opcodes: list[EventOpcode] = []
    pos = 0
    while pos < len(segment):
        opcode = segment[pos]
        if opcode == EMPTY_OPCODE:
            return None, f"filler byte 0xFF at +{pos}"
        if get_opcode(opcode) is None:
            return None, f"no definition for opcode 0x{opcode:02X} at +{pos}"
        size = resolve_size(segment, pos, opcodes, config)
        if size is None:
            return None, f"ambiguous size for opcode 0x{opcode:02X} at +{pos}"
        if pos + size > len(segment):
            return None, f"opcode 0x{opcode:02X} at +{pos} overruns series ({size} bytes)"
        opcodes.append(EventOpcode(opcode, segment[pos + 1:pos + size]))
        pos += size
    return opcodes, ""


# ---- Header ----

@dataclass
class EventHeader:
    block_count: int = 0
    block_sizes: list[int] = field(default_factory=list)

    @classmethod
    def decode(cls, cursor: Cursor, config: CodecConfig = DEFAULT_CONFIG) -> EventHeader:
        block_count = cursor.u32()
        if block_count == 0 or block_count > config.max_block_count:
            raise InvalidBlockCount(f"Invalid BlockCount: {block_count}")

        block_sizes = []
        for i in range(block_count):
            size = cursor.u32()
            if size == 0:
                raise InvalidBlockSize(f"Invalid block size (0) at index {i}")
            block_sizes.append(size)

        return cls(block_count=block_count, block_sizes=block_sizes)

    def encode(self, cursor: Cursor) -> None:
        cursor.write_u32(self.block_count)
        for size in self.block_sizes:
            cursor.write_u32(size)


# ---- Block ----

@dataclass
class EventBlock:
    """All events for one entity (or the zone/player when actor is 0x7FFFFFFF)."""
    actor_number: int = 0
    tag_offsets: list[int] = field(default_factory=list)
    event_exec_nums: list[int] = field(default_factory=list)
    immed_data: list[int] = field(default_factory=list)
    series: list[EventSeries] = field(default_factory=list)
    # Stream bytes no tag points into
    prologue: bytes = b""

    @property
    def tag_count(self) -> int:
        return len(self.tag_offsets)

    @property
    def immed_count(self) -> int:
        return len(self.immed_data)

    @property
    def is_player_block(self) -> bool:
        return self.actor_number == PLAYER_ACTOR

    @classmethod
    def decode(
        cls,
        cursor: Cursor,
        config: CodecConfig = DEFAULT_CONFIG,
        index: int = 0,
    ) -> EventBlock:
        actor_number = cursor.u32()
        tag_count = cursor.u32()
        tag_offsets = [cursor.u16() for _ in range(tag_count)]
        event_exec_nums = [cursor.u16() for _ in range(tag_count)]
        immed_count = cursor.u32()
        immed_data = [cursor.u32() for _ in range(immed_count)]

        event_data_size = cursor.u32()
        if event_data_size == 0 or event_data_size > cursor.remaining():
            raise InvalidEventDataSize(
                f"Invalid EventDataSize: {event_data_size} (block {index}, "
                f"{cursor.remaining()} bytes left)"
            )

        stream_start = cursor.offset
        stream_end = stream_start + event_data_size
        series = []
        for i, (relative, exec_num) in enumerate(zip(tag_offsets, event_exec_nums)):
            start = stream_start + relative
            end = stream_start + tag_offsets[i + 1] if i + 1 < tag_count else stream_end
            if start > end or end > stream_end:
                raise InvalidSeriesBounds(
                    f"Invalid series boundaries in block {index}: "
                    f"start=0x{start:04X}, end=0x{end:04X}, stream end=0x{stream_end:04X}"
                )
            series.append(cls._decode_series(cursor, start, end, exec_num, config, index))

        prologue_end = stream_start + tag_offsets[0] if tag_count else stream_end
        cursor.goto(stream_start)
        prologue = cursor.take(prologue_end - stream_start)
        if prologue:
            log.info(
                "Block %d: %d stream bytes ahead of the first tag kept as prologue",
                index, len(prologue),
            )

        cursor.goto(stream_end)
        padding = _padding(event_data_size)
        cursor.skip(min(padding, cursor.remaining()))

        return cls(
            actor_number=actor_number,
            tag_offsets=tag_offsets,
            event_exec_nums=event_exec_nums,
            immed_data=immed_data,
            series=series,
            prologue=prologue,
        )

    @staticmethod
    def _decode_series(
        cursor: Cursor,
        start: int,
        end: int,
        exec_num: int,
        config: CodecConfig,
        block_index: int,
    ) -> EventSeries:
        if start == end:
            return EventSeries(id=exec_num, payload=RawBytes(b""))

        cursor.goto(start)
        segment = cursor.take(end - start)
        opcodes, reason = decode_instructions(segment, config)
        if opcodes is None:
            log.info(
                "Block %d event %d: %s; keeping %d bytes at 0x%X as raw",
                block_index, exec_num, reason, len(segment), start,
            )
            return EventSeries(id=exec_num, payload=RawBytes(segment))
        return EventSeries(id=exec_num, payload=opcodes)

    def event_data(self) -> bytes:
        return self.prologue + b"".join(s.to_bytes() for s in self.series)

    def computed_tag_offsets(self) -> list[int]:
        """Tag offsets implied by the prologue and the current series lengths."""
        offsets = []
        position = len(self.prologue)
        for s in self.series:
            offsets.append(position)
            position += s.size
        return offsets

    def encode(self, cursor: Cursor) -> None:
        if len(self.series) != len(self.event_exec_nums):
            raise ValueError(
                f"Block has {len(self.series)} series but {len(self.event_exec_nums)} exec nums"
            )
        data = self.event_data()
        if not data:
            raise ValueError(f"Block for actor 0x{self.actor_number:08X} has no event data to write")

        cursor.write_u32(self.actor_number)
        cursor.write_u32(len(self.series))
        for offset in self.computed_tag_offsets():
            cursor.write_u16(offset)
        for s in self.series:
            cursor.write_u16(s.id)
        cursor.write_u32(len(self.immed_data))
        for value in self.immed_data:
            cursor.write_u32(value)
        cursor.write_u32(len(data))
        cursor.write_bytes(data)
        cursor.write_bytes(bytes([PAD_BYTE]) * _padding(len(data)))

    def to_dict(self) -> dict:
        d = {
            "actor_number": self.actor_number,
            "tag_count": self.tag_count,
            "tag_offsets": list(self.tag_offsets),
            "event_exec_nums": list(self.event_exec_nums),
            "immed_count": self.immed_count,
            "immed_data": list(self.immed_data),
            "series": [s.to_dict() for s in self.series],
        }
        if self.prologue:
            d["prologue"] = bytes_to_hex_list(self.prologue)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> EventBlock:
        series = [EventSeries.from_dict(s) for s in data.get("series", [])]
        block = cls(
            actor_number=data["actor_number"],
            tag_offsets=list(data.get("tag_offsets", [])),
            event_exec_nums=list(data.get("event_exec_nums", [s.id for s in series])),
            immed_data=list(data.get("immed_data", [])),
            series=series,
            prologue=hex_list_to_bytes(data.get("prologue", [])),
        )
        if not block.tag_offsets:
            block.tag_offsets = block.computed_tag_offsets()
        return block


# ---- File ----

@dataclass
class EventFile:
    header: EventHeader = field(default_factory=EventHeader)
    blocks: list[EventBlock] = field(default_factory=list)

    @classmethod
    def decode(cls, data: bytes, config: CodecConfig = DEFAULT_CONFIG) -> EventFile:
        cursor = Cursor(data)
        header = EventHeader.decode(cursor, config)
        blocks = [EventBlock.decode(cursor, config, i) for i in range(header.block_count)]
        if cursor.remaining():
            log.debug("%d trailing bytes after last event block", cursor.remaining())
        return cls(header=header, blocks=blocks)

    @classmethod
    def from_path(cls, path: str | Path, config: CodecConfig = DEFAULT_CONFIG) -> EventFile:
        return cls.decode(Path(path).read_bytes(), config)

    def encode(self, recompute_sizes: bool = False) -> bytes:
        """Serialize back to DAT bytes.

        Block sizes are written from the header unless recompute_sizes is
        set, in which case each block's encoded length (padding included)
        is used.
        """
        if not recompute_sizes and len(self.header.block_sizes) != len(self.blocks):
            raise ValueError(
                f"Header lists {len(self.header.block_sizes)} block sizes "
                f"for {len(self.blocks)} blocks"
            )

        encoded_blocks = []
        for block in self.blocks:
            block_cursor = Cursor()
            block.encode(block_cursor)
            encoded_blocks.append(block_cursor.to_bytes())

        sizes = [len(b) for b in encoded_blocks] if recompute_sizes else self.header.block_sizes
        cursor = Cursor()
        EventHeader(block_count=len(self.blocks), block_sizes=list(sizes)).encode(cursor)
        for data in encoded_blocks:
            cursor.write_bytes(data)
        return cursor.to_bytes()

    def stats(self) -> dict:
        series = [s for b in self.blocks for s in b.series]
        raw = [s for s in series if s.is_raw and s.size]
        return {
            "blocks": len(self.blocks),
            "series": len(series),
            "empty_series": sum(1 for s in series if s.size == 0),
            "opcodes": sum(len(s.opcodes) for s in series),
            "raw_series": len(raw),
            "raw_bytes": sum(s.size for s in raw),
        }

    def to_dict(self) -> dict:
        return {
            "header": {
                "block_count": self.header.block_count,
                "block_sizes": list(self.header.block_sizes),
            },
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> EventFile:
        blocks = [EventBlock.from_dict(b) for b in data.get("blocks", [])]
        header = data.get("header", {})
        return cls(
            header=EventHeader(
                block_count=header.get("block_count", len(blocks)),
                block_sizes=list(header.get("block_sizes", [])),
            ),
            blocks=blocks,
        )


def looks_like_event_file(data: bytes, config: CodecConfig = DEFAULT_CONFIG) -> bool:
    """Cheap header-only check used before a full decode."""
    try:
        EventHeader.decode(Cursor(data), config)
    except DatError:
        return False
    return True
