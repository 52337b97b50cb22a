"""Tests for the zone model header."""

import struct

import pytest

from builders import build_zone_model
from xidat.errors import OutOfRangeError, ZoneModelError
from xidat.zone.zone_model import ZoneModel


def test_header_fields(mirrored_mesh):
    model = ZoneModel.decode(build_zone_model([mirrored_mesh]))
    assert model.len_and_type == 0x123
    assert model.mesh_offset == 0x20
    assert model.grid_width == 10
    assert model.grid_height == 10
    assert model.bucket_width == 2
    assert model.bucket_height == 3
    assert model.unknown_data == b"\xab\xcd\xef\x01"
    assert model.mesh_model_count == 1
    assert model.grid_offset == 0x3C


def test_derived_counts(mirrored_mesh):
    model = ZoneModel.decode(build_zone_model([mirrored_mesh], objects=3))
    assert model.object_count == 3
    assert model.shortname_count == 0


def test_counts_saturate_at_zero():
    model = ZoneModel(objects_end_offset=0x10, mesh_offset=0x20, shortname_offset=0x40)
    assert model.object_count == 0
    assert model.shortname_count == 0


def test_collision_mesh_attached(mirrored_mesh):
    model = ZoneModel.decode(build_zone_model([mirrored_mesh]))
    mesh = model.collision_mesh
    assert len(mesh.grid_entries) == 1
    assert mesh.grid_entries[0].mesh_entries[0].flags == 0x0102


def test_zero_grid_has_no_entries(mirrored_mesh):
    model = ZoneModel.decode(build_zone_model([mirrored_mesh], grid_bytes=(0, 0)))
    assert model.grid_width == 0
    assert model.collision_mesh.grid_entries == []


@pytest.mark.parametrize("mesh_offset", [0x00, 0x10, 0x1B])
def test_mesh_offset_inside_header(mirrored_mesh, mesh_offset):
    body = bytearray(build_zone_model([mirrored_mesh]))
    body[8:12] = struct.pack("<I", mesh_offset)
    with pytest.raises(ZoneModelError):
        ZoneModel.decode(bytes(body))


def test_mesh_offset_past_end(mirrored_mesh):
    body = bytearray(build_zone_model([mirrored_mesh]))
    body[8:12] = struct.pack("<I", len(body))
    with pytest.raises(ZoneModelError):
        ZoneModel.decode(bytes(body))


def test_truncated_mesh_header():
    body = bytearray(0x24)
    body[8:12] = struct.pack("<I", 0x20)
    with pytest.raises(OutOfRangeError):
        ZoneModel.decode(bytes(body))


def test_to_dict(mirrored_mesh):
    d = ZoneModel.decode(build_zone_model([mirrored_mesh])).to_dict()
    assert d["unknown_data"] == ["0xAB", "0xCD", "0xEF", "0x01"]
    assert d["grid_width"] == 10
    assert len(d["collision_mesh"]["grid_entries"]) == 1
