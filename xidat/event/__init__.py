from .opcodes import EventOpcode, OpcodeDef, KNOWN_OPCODES, get_opcode, describe, resolve_size
from .codec import (
    EventFile, EventHeader, EventBlock, EventSeries, RawBytes,
    decode_instructions, looks_like_event_file,
)

__all__ = [
    "EventOpcode", "OpcodeDef", "KNOWN_OPCODES", "get_opcode", "describe", "resolve_size",
    "EventFile", "EventHeader", "EventBlock", "EventSeries", "RawBytes",
    "decode_instructions", "looks_like_event_file",
]
