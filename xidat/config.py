"""
Codec configuration.

Defaults reproduce the documented decoder behavior; tools flip them to
investigate files the heuristics get wrong.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CodecConfig:
    """Knobs shared by the event and zone decoders."""
    # Upper bound on EventHeader.block_count
    max_block_count: int = 1024
    # Try the next-opcode lookahead before falling back to resolvers
    lookahead: bool = True
    # Use the per-opcode size resolvers from the registry
    resolvers: bool = True
    # Raise CollisionMeshError when vertex/normal arrays don't end where the
    # next array starts (otherwise just log it)
    strict_mesh_offsets: bool = True


DEFAULT_CONFIG = CodecConfig()
