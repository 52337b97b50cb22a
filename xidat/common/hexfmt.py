"""
Hex text helpers for the human-editable form of decoded files.

Byte arrays are written as lists of "0xHH" strings so a JSON dump can be
edited by hand and fed back to the encoder.
"""

from __future__ import annotations


def hex_byte(value: int) -> str:
    return f"0x{value:02X}"


def parse_hex_byte(text: str | int) -> int:
    """Parse "0xHH" (or a plain int) into a byte value."""
    if isinstance(text, int):
        value = text
    else:
        digits = text.strip()
        if digits[:2].lower() == "0x":
            digits = digits[2:]
        try:
            value = int(digits, 16)
        except ValueError:
            raise ValueError(f"Invalid hex string: {text!r}") from None
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Hex value out of byte range: {text!r}")
    return value


def bytes_to_hex_list(data: bytes) -> list[str]:
    return [hex_byte(b) for b in data]


def hex_list_to_bytes(values: list[str | int]) -> bytes:
    return bytes(parse_hex_byte(v) for v in values)


def pretty_hex(data: bytes, base: int = 0) -> str:
    """16-byte wide hex dump with ASCII."""
    lines = []
    for i in range(0, len(data), 16):
        chunk = data[i:i+16]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        lines.append(f"  {base + i:04x}  {hex_part:<48s}  {ascii_part}")
    return "\n".join(lines)
