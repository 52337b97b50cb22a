"""
Zone chunk ciphers.

Chunk bodies of the model (0x1C) and MMB (0x2E) types are obfuscated. Three
transforms exist, each keyed from a body byte through KEY_TABLE and each a
no-op unless its marker is present in the body:

    decode_1b    body[3] == 0x1B   XOR 0xFF over key-selected spans, then
                                   XOR 0x55 over 16 bytes of every node
    decode_05    body[3] == 0x05   per-byte XOR with a rolling 16-bit key
    decode_swap  body[6:8] != FFFF swap 8-byte windows between two halves

The 24-bit value at body[0] is the length the cipher covers. Every
function works on a copy and returns the transformed bytes.
"""

from __future__ import annotations

from xidat.common.cursor import Cursor
from xidat.zone.key_table import KEY_TABLE

MARKER_1B = 0x1B
MARKER_05 = 0x05

NODE_BASE = 0x20
NODE_STRIDE = 0x64
NODE_KEY_BYTES = 0x10


def _covered_length(walker: Cursor) -> int:
    return walker.u32_at(0) & 0xFFFFFF


def decode_1b(data: bytes) -> bytes:
    if len(data) < 8 or data[3] != MARKER_1B:
        return data

    walker = Cursor(data)
    buf = walker.data
    length = _covered_length(walker)
    key = KEY_TABLE[buf[7] ^ 0xFF]

    key_counter = 0
    pos = 8
    while pos < length:
        xor_len = ((key >> 4) & 7) + 16
        if key & 1 and pos + xor_len < length:
            walker.check(pos, xor_len)
            for idx in range(pos, pos + xor_len):
                buf[idx] ^= 0xFF
        key_counter += 1
        key += key_counter
        pos += xor_len

    node_count = walker.u32_at(4) & 0xFFFFFF
    for node in range(node_count):
        start = NODE_BASE + node * NODE_STRIDE
        walker.check(start, NODE_KEY_BYTES)
        for idx in range(start, start + NODE_KEY_BYTES):
            buf[idx] ^= 0x55

    return walker.to_bytes()


def decode_05(data: bytes) -> bytes:
    if len(data) < 8 or data[3] != MARKER_05:
        return data

    walker = Cursor(data)
    buf = walker.data
    length = _covered_length(walker)
    walker.check(8, max(0, length - 8))
    key = KEY_TABLE[buf[5] ^ 0xF0]

    key_counter = 0
    for pos in range(8, length):
        x = (key << 8) | key
        key_counter += 1
        key += key_counter

        buf[pos] ^= (x >> (key & 7)) & 0xFF

        key_counter += 1
        key += key_counter
        key &= 0xFF

    return walker.to_bytes()


def decode_swap(data: bytes) -> bytes:
    if len(data) < 8 or (data[6] == 0xFF and data[7] == 0xFF):
        return data

    walker = Cursor(data)
    length = _covered_length(walker)
    if length < 8:
        return data

    key1 = walker.u8_at(5) ^ 0xF0
    key2 = KEY_TABLE[key1]

    decode_count = ((length - 8) & ~0xF) // 2
    offset1 = 8
    offset2 = offset1 + decode_count

    for _ in range(0, decode_count, 8):
        if key2 & 1:
            walker.swap8(offset1, offset2)
        key1 += 9
        key2 += key1
        offset1 += 8
        offset2 += 8

    return walker.to_bytes()
