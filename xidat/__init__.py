"""
xidat — decoders/encoders for the game's DAT resource files.

Subpackages:
    common/  — byte cursor + hex text helpers
    event/   — event bytecode files (opcode registry + codec)
    zone/    — zone data chunk container, ciphers, collision mesh, MMB
    cli/     — command line entry point
"""

__version__ = "0.3.0"
