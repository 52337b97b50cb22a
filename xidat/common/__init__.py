from .cursor import Cursor, U8, U16, U32, F32
from .hexfmt import hex_byte, parse_hex_byte, bytes_to_hex_list, hex_list_to_bytes, pretty_hex

__all__ = [
    "Cursor", "U8", "U16", "U32", "F32",
    "hex_byte", "parse_hex_byte", "bytes_to_hex_list", "hex_list_to_bytes", "pretty_hex",
]
