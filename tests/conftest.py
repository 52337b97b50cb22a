"""Shared fixtures for xidat tests."""

import pytest

from builders import build_block, build_event_file


# ---- Fixtures ----

@pytest.fixture
def simple_event_bytes() -> bytes:
    """Two blocks: decodable series, an empty series and a padded stream."""
    block_a = build_block(
        [bytes([0x01, 0xAA, 0xBB, 0x00]), bytes([0x03, 1, 2, 3, 4])],
        exec_nums=[10, 11],
        immed=[0xDEADBEEF],
    )
    block_b = build_block(
        [b"", bytes([0x00])],
        exec_nums=[20, 21],
        actor=0x7FFFFFFF,
    )
    return build_event_file([block_a, block_b])


@pytest.fixture
def mirrored_mesh() -> dict:
    return {
        "matrix": (
            1.0, 0.0, 0.0, 0.0,
            0.0, 1.0, 0.0, 0.0,
            0.0, 0.0, 1.0, 0.0,
            10.0, 20.0, 30.0, 1.0,
        ),
        "vertices": [(1.0, 2.0, 3.0), (-1.0, 0.5, 0.0), (0.0, 0.0, 4.0)],
        "normals": [(0.0, 1.0, 0.0)],
        "triangles": [(0, 1, 2, 0)],
        "flags": 0x0102,
    }
