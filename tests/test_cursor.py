"""Tests for the byte cursor and hex text helpers."""

import pytest

from xidat.common.cursor import U16, U32, Cursor
from xidat.common.hexfmt import (
    bytes_to_hex_list, hex_byte, hex_list_to_bytes, parse_hex_byte, pretty_hex,
)
from xidat.errors import DatError, OutOfRangeError


class TestReads:
    def test_little_endian_reads_advance(self):
        c = Cursor(b"\x01\x02\x03\x04\x05\x06\x07")
        assert c.u8() == 0x01
        assert c.u16() == 0x0302
        assert c.u32() == 0x07060504
        assert c.offset == 7
        assert c.remaining() == 0

    def test_read_at_does_not_move(self):
        c = Cursor(b"\x00\x00\x80\x3f")
        assert c.f32_at(0) == 1.0
        assert c.offset == 0

    def test_read_past_end_raises(self):
        c = Cursor(b"\x01\x02\x03")
        with pytest.raises(OutOfRangeError) as exc:
            c.u32()
        assert exc.value.buffer_length == 3
        assert isinstance(exc.value, DatError)

    def test_take_is_strict(self):
        c = Cursor(b"abc")
        with pytest.raises(OutOfRangeError):
            c.take(4)
        assert c.offset == 0

    def test_take_remaining_clamps(self):
        c = Cursor(b"abc", offset=1)
        assert c.take_remaining(10) == b"bc"
        assert c.remaining() == 0

    def test_peek(self):
        c = Cursor(b"MMB\x01")
        assert c.peek(3) == b"MMB"
        assert c.peek_at(1, 2) == b"MB"
        assert c.offset == 0


class TestPositioning:
    def test_goto_end_allowed(self):
        c = Cursor(b"abcd")
        c.goto(4)
        assert c.remaining() == 0

    def test_goto_past_end_raises(self):
        c = Cursor(b"abcd")
        with pytest.raises(OutOfRangeError):
            c.goto(5)

    def test_skip_is_strict(self):
        c = Cursor(b"abcd", offset=2)
        with pytest.raises(OutOfRangeError):
            c.skip(3)
        c.skip(2)
        assert c.offset == 4


class TestWrites:
    def test_writes_grow_buffer(self):
        c = Cursor()
        c.write_u32(0x11223344)
        c.write_u16(0x5566)
        c.write_u8(0x77)
        assert c.to_bytes() == b"\x44\x33\x22\x11\x66\x55\x77"

    def test_write_at_zero_fills(self):
        c = Cursor()
        c.write_at(4, U16, 0xBEEF)
        assert c.to_bytes() == b"\x00\x00\x00\x00\xef\xbe"
        assert c.offset == 0

    def test_write_bytes_at_overwrites(self):
        c = Cursor(b"\x00" * 6)
        c.write_bytes_at(2, b"\xaa\xbb")
        assert c.to_bytes() == b"\x00\x00\xaa\xbb\x00\x00"

    def test_set_size(self):
        c = Cursor(b"abcdef", offset=5)
        c.set_size(3)
        assert c.to_bytes() == b"abc"
        assert c.offset == 3
        c.set_size(5)
        assert c.to_bytes() == b"abc\x00\x00"

    def test_swap8(self):
        c = Cursor(bytes(range(24)))
        c.swap8(0, 16)
        data = c.to_bytes()
        assert data[0:8] == bytes(range(16, 24))
        assert data[16:24] == bytes(range(8))
        assert data[8:16] == bytes(range(8, 16))

    def test_input_is_copied(self):
        source = bytearray(b"\x01\x02\x03\x04")
        c = Cursor(source)
        c.write_at(0, U32, 0)
        assert source == bytearray(b"\x01\x02\x03\x04")


class TestHexText:
    def test_hex_byte(self):
        assert hex_byte(0x0A) == "0x0A"
        assert bytes_to_hex_list(b"\x00\xff") == ["0x00", "0xFF"]

    def test_parse_variants(self):
        assert parse_hex_byte("0x1f") == 0x1F
        assert parse_hex_byte("FF") == 0xFF
        assert parse_hex_byte(7) == 7

    @pytest.mark.parametrize("bad", ["0x100", "zz", -1])
    def test_parse_rejects(self, bad):
        with pytest.raises(ValueError):
            parse_hex_byte(bad)

    def test_hex_list_to_bytes(self):
        assert hex_list_to_bytes(["0x01", "0xAB", 3]) == b"\x01\xab\x03"

    def test_pretty_hex(self):
        dump = pretty_hex(b"AB\x00", base=0x10)
        assert dump.startswith("  0010  41 42 00")
        assert dump.endswith("AB.")
