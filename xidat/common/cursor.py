"""
Byte Cursor — position-tracking view over a DAT buffer.

Every codec in the package reads and writes through this class:
1. Fixed-width little-endian reads/writes (u8/u16/u32/f32), at the current
   position (advancing) or at an absolute offset (not advancing)
2. Bulk byte ranges, always returned as copies
3. Writes grow the buffer with zero fill, so encoders can start empty

Reads never clamp, with one exception: take_remaining() returns whatever is
left when the caller knows trailing data may be short.
"""

from __future__ import annotations

import struct

from xidat.errors import OutOfRangeError

U8 = struct.Struct("<B")
U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
F32 = struct.Struct("<f")


class Cursor:
    """Owned mutable buffer + offset."""

    def __init__(self, data: bytes | bytearray = b"", offset: int = 0):
        self.data = bytearray(data)
        self.offset = 0
        self.goto(offset)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Cursor(offset=0x{self.offset:x}, len=0x{len(self.data):x})"

    # ---- Positioning ----

    def remaining(self) -> int:
        return max(0, len(self.data) - self.offset)

    def goto(self, offset: int) -> None:
        """Jump to an absolute offset (offset == len is allowed)."""
        if offset < 0 or offset > len(self.data):
            raise OutOfRangeError(len(self.data), offset)
        self.offset = offset

    def skip(self, count: int) -> None:
        self.check(self.offset, count)
        self.offset += count

    def check(self, offset: int, count: int) -> None:
        """Raise OutOfRangeError unless count bytes exist at offset."""
        if offset < 0 or count < 0 or offset + count > len(self.data):
            raise OutOfRangeError(len(self.data), offset, count)

    # ---- Reads ----

    def read_at(self, offset: int, fmt: struct.Struct):
        self.check(offset, fmt.size)
        return fmt.unpack_from(self.data, offset)[0]

    def read(self, fmt: struct.Struct):
        value = self.read_at(self.offset, fmt)
        self.offset += fmt.size
        return value

    def bytes_at(self, offset: int, count: int) -> bytes:
        self.check(offset, count)
        return bytes(self.data[offset:offset + count])

    def peek(self, count: int) -> bytes:
        return self.bytes_at(self.offset, count)

    def peek_at(self, offset: int, count: int) -> bytes:
        return self.bytes_at(offset, count)

    def take(self, count: int) -> bytes:
        data = self.bytes_at(self.offset, count)
        self.offset += count
        return data

    def take_remaining(self, count: int) -> bytes:
        """Like take(), but returns fewer bytes if the buffer ends first."""
        if count < 0:
            raise OutOfRangeError(len(self.data), self.offset, count)
        return self.take(min(count, self.remaining()))

    def u8(self) -> int:
        return self.read(U8)

    def u16(self) -> int:
        return self.read(U16)

    def u32(self) -> int:
        return self.read(U32)

    def f32(self) -> float:
        return self.read(F32)

    def u8_at(self, offset: int) -> int:
        return self.read_at(offset, U8)

    def u16_at(self, offset: int) -> int:
        return self.read_at(offset, U16)

    def u32_at(self, offset: int) -> int:
        return self.read_at(offset, U32)

    def f32_at(self, offset: int) -> float:
        return self.read_at(offset, F32)

    # ---- Writes ----

    def _grow(self, end: int) -> None:
        if end > len(self.data):
            self.data.extend(b"\x00" * (end - len(self.data)))

    def write_at(self, offset: int, fmt: struct.Struct, value) -> None:
        if offset < 0:
            raise OutOfRangeError(len(self.data), offset, fmt.size)
        self._grow(offset + fmt.size)
        fmt.pack_into(self.data, offset, value)

    def write(self, fmt: struct.Struct, value) -> None:
        self.write_at(self.offset, fmt, value)
        self.offset += fmt.size

    def write_bytes_at(self, offset: int, data: bytes | bytearray) -> None:
        if offset < 0:
            raise OutOfRangeError(len(self.data), offset, len(data))
        end = offset + len(data)
        self._grow(end)
        self.data[offset:end] = data

    def write_bytes(self, data: bytes | bytearray) -> None:
        self.write_bytes_at(self.offset, data)
        self.offset += len(data)

    def write_u8(self, value: int) -> None:
        self.write(U8, value)

    def write_u16(self, value: int) -> None:
        self.write(U16, value)

    def write_u32(self, value: int) -> None:
        self.write(U32, value)

    def write_f32(self, value: float) -> None:
        self.write(F32, value)

    def write_u8_at(self, offset: int, value: int) -> None:
        self.write_at(offset, U8, value)

    def set_size(self, size: int) -> None:
        """Truncate or zero-extend the buffer; the offset is clamped to fit."""
        if size < 0:
            raise OutOfRangeError(len(self.data), size)
        if size < len(self.data):
            del self.data[size:]
        else:
            self._grow(size)
        self.offset = min(self.offset, size)

    def swap8(self, a: int, b: int) -> None:
        """Swap the 8-byte windows at a and b."""
        self.check(a, 8)
        self.check(b, 8)
        window_a = self.data[a:a + 8]
        self.data[a:a + 8] = self.data[b:b + 8]
        self.data[b:b + 8] = window_a

    def to_bytes(self) -> bytes:
        return bytes(self.data)
