"""
Error types raised by the DAT codecs.

Structural problems (bad counts, offsets past the end of the buffer) raise
one of these and abort the enclosing decode call. Ambiguous data is not an
error: the codecs degrade it to raw bytes and log it instead.
"""

from __future__ import annotations


class DatError(Exception):
    """Base class for every decode/encode failure."""


class OutOfRangeError(DatError):
    """A read or seek touched bytes outside the buffer."""

    def __init__(self, buffer_length: int, offset: int, count: int = 0):
        self.buffer_length = buffer_length
        self.offset = offset
        self.count = count
        super().__init__(
            f"range [{offset}, {offset + count}) outside buffer of {buffer_length} bytes"
        )


# ---- Event files ----

class InvalidBlockCount(DatError):
    pass


class InvalidBlockSize(DatError):
    pass


class InvalidEventDataSize(DatError):
    pass


class InvalidSeriesBounds(DatError):
    pass


# ---- Zone data ----

class InvalidChunkTag(DatError):
    pass


class InvalidChunkLength(DatError):
    pass


class ZoneModelError(DatError):
    pass


class ZoneModelNotFound(DatError):
    pass


class CollisionMeshError(DatError):
    pass


class MmbError(DatError):
    pass
