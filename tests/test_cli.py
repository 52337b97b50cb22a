"""Tests for the xidat command line."""

import json

from builders import build_block, build_chunk, build_event_file, build_zone_model
from xidat.cli.main import build_parser, main


def test_parser_requires_command():
    parser = build_parser()
    args = parser.parse_args(["opcodes", "--opcode", "0x46"])
    assert args.cmd == "opcodes"
    assert args.opcode == "0x46"


def test_event_dump_writes_json(tmp_path, simple_event_bytes, capsys):
    src = tmp_path / "event.dat"
    src.write_bytes(simple_event_bytes)
    out = tmp_path / "event.json"

    assert main(["event-dump", str(src), "-o", str(out), "--blocks"]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["header"]["block_count"] == 2
    assert "Event coverage" in capsys.readouterr().out


def test_event_dump_verbose_hex_dumps_raw_series(tmp_path, capsys):
    ambiguous = bytes([0x31]) + bytes(10)
    src = tmp_path / "event.dat"
    src.write_bytes(build_event_file([build_block([ambiguous, b"\x00"], exec_nums=[4, 5])]))

    assert main(["-v", "event-dump", str(src), "--blocks"]) == 0
    out = capsys.readouterr().out
    assert "Block 0 event 4 (11 raw bytes)" in out
    assert "0000  31 00 00 00" in out
    assert "event 5" not in out


def test_event_build_round_trip(tmp_path, simple_event_bytes):
    src = tmp_path / "event.dat"
    src.write_bytes(simple_event_bytes)
    dumped = tmp_path / "event.json"
    rebuilt = tmp_path / "rebuilt.dat"

    assert main(["event-dump", str(src), "-o", str(dumped)]) == 0
    assert main(["event-build", str(dumped), "-o", str(rebuilt)]) == 0
    assert rebuilt.read_bytes() == simple_event_bytes


def test_event_build_without_header(tmp_path):
    doc = {"blocks": [{"actor_number": 1, "series": [{"id": 0, "raw": ["0x00"]}]}]}
    src = tmp_path / "event.json"
    src.write_text(json.dumps(doc), encoding="utf-8")
    out = tmp_path / "event.dat"

    assert main(["event-build", str(src), "-o", str(out)]) == 0
    expected = build_event_file([build_block([b"\x00"], exec_nums=[0], actor=1)])
    assert out.read_bytes() == expected


def test_event_roundtrip_identical(tmp_path, simple_event_bytes, capsys):
    src = tmp_path / "event.dat"
    src.write_bytes(simple_event_bytes)
    assert main(["event-roundtrip", str(src)]) == 0
    assert "Identical" in capsys.readouterr().out


def test_event_roundtrip_reports_mismatch(tmp_path, simple_event_bytes, capsys):
    src = tmp_path / "event.dat"
    src.write_bytes(simple_event_bytes + b"\x00\x00\x00\x00")
    assert main(["event-roundtrip", str(src)]) == 1
    assert "Mismatch" in capsys.readouterr().out


def test_event_dump_bad_file(tmp_path):
    src = tmp_path / "bad.dat"
    src.write_bytes(b"\x00\x00\x00\x00")
    assert main(["event-dump", str(src)]) == 1


def test_missing_file(tmp_path):
    assert main(["event-dump", str(tmp_path / "missing.dat")]) == 1


def test_zone_dump(tmp_path, mirrored_mesh, capsys):
    src = tmp_path / "zone.dat"
    src.write_bytes(
        build_chunk(b"mzb_", 0x1C, build_zone_model([mirrored_mesh]))
        + build_chunk(b"none", 0x20, bytes(16))
    )
    out = tmp_path / "zone.json"

    assert main(["zone-dump", str(src), "-o", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [c["tag"] for c in data["chunks"]] == ["mzb_", "none"]
    assert "mzb_" in capsys.readouterr().out


def test_opcodes_single(capsys):
    assert main(["opcodes", "--opcode", "0x46"]) == 0
    assert "0x46" in capsys.readouterr().out


def test_opcodes_unknown():
    assert main(["opcodes", "--opcode", "0xEE"]) == 1


def test_opcodes_bad_hex():
    assert main(["opcodes", "--opcode", "zz"]) == 1


def test_opcodes_all(capsys):
    assert main(["opcodes"]) == 0
    out = capsys.readouterr().out
    assert "0x00" in out
    assert "0xD9" in out
