"""
xidat — command line front end for the DAT codecs.

Usage:
    xidat event-dump EVENT.DAT -o event.json      # decode to editable JSON
    xidat event-build event.json -o EVENT.DAT     # JSON back to DAT bytes
    xidat event-roundtrip EVENT.DAT               # decode + encode + compare
    xidat zone-dump ZONE.DAT -o zone.json         # chunk table (+ JSON)
    xidat opcodes --opcode 0x46                   # opcode registry lookup
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from xidat import __version__
from xidat.common.hexfmt import hex_byte, parse_hex_byte, pretty_hex
from xidat.config import CodecConfig
from xidat.errors import DatError
from xidat.event import KNOWN_OPCODES, EventFile
from xidat.zone import UnknownChunk, ZoneData, ZoneMmb, ZoneModel

log = logging.getLogger("xidat")

console = Console()


def _config(args: argparse.Namespace) -> CodecConfig:
    return CodecConfig(
        lookahead=not getattr(args, "no_lookahead", False),
        resolvers=not getattr(args, "no_resolvers", False),
        strict_mesh_offsets=not getattr(args, "lenient_mesh", False),
    )


def _write_json(path: str, data: dict) -> None:
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")
    console.print(f"[green]Wrote[/green] {path}")


def _first_difference(a: bytes, b: bytes) -> int | None:
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    if len(a) != len(b):
        return min(len(a), len(b))
    return None


# ---- Event commands ----

def _print_event_stats(path: str, event_file: EventFile) -> None:
    stats = event_file.stats()
    console.print(f"[bold]File:[/bold] {path}")
    t = Table(title="Event coverage")
    t.add_column("Blocks", justify="right")
    t.add_column("Series", justify="right")
    t.add_column("Empty", justify="right")
    t.add_column("Opcodes", justify="right")
    t.add_column("Raw series", justify="right")
    t.add_column("Raw bytes", justify="right")
    t.add_row(*(str(stats[k]) for k in (
        "blocks", "series", "empty_series", "opcodes", "raw_series", "raw_bytes",
    )))
    console.print(t)


def _print_raw_dumps(event_file: EventFile) -> None:
    for i, block in enumerate(event_file.blocks):
        if block.prologue:
            console.print(f"[bold]Block {i} prologue[/bold] ({len(block.prologue)} bytes)")
            console.print(pretty_hex(block.prologue), markup=False, highlight=False)
        for s in block.series:
            if s.is_raw and s.size:
                console.print(f"[bold]Block {i} event {s.id}[/bold] ({s.size} raw bytes)")
                console.print(pretty_hex(s.payload.data), markup=False, highlight=False)


def cmd_event_dump(args: argparse.Namespace) -> int:
    event_file = EventFile.from_path(args.file, _config(args))
    _print_event_stats(args.file, event_file)

    if args.blocks:
        bt = Table(title="Blocks")
        bt.add_column("#", justify="right")
        bt.add_column("Actor")
        bt.add_column("Tags", justify="right")
        bt.add_column("Immed", justify="right")
        bt.add_column("Raw series", justify="right")
        for i, block in enumerate(event_file.blocks):
            actor = "player/zone" if block.is_player_block else f"0x{block.actor_number:08X}"
            raw = sum(1 for s in block.series if s.is_raw and s.size)
            bt.add_row(str(i), actor, str(block.tag_count), str(block.immed_count), str(raw))
        console.print(bt)

        if args.verbose:
            _print_raw_dumps(event_file)

    if args.out:
        _write_json(args.out, event_file.to_dict())
    return 0


def cmd_event_build(args: argparse.Namespace) -> int:
    data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    event_file = EventFile.from_dict(data)
    recompute = args.recompute_sizes or not event_file.header.block_sizes
    encoded = event_file.encode(recompute_sizes=recompute)
    Path(args.out).write_bytes(encoded)
    console.print(f"[green]Wrote[/green] {args.out} ({len(encoded)} bytes, {len(event_file.blocks)} blocks)")
    return 0


def cmd_event_roundtrip(args: argparse.Namespace) -> int:
    source = Path(args.file).read_bytes()
    event_file = EventFile.decode(source, _config(args))
    encoded = event_file.encode()
    _print_event_stats(args.file, event_file)

    diff = _first_difference(source, encoded)
    if diff is None:
        console.print(f"[green]Identical[/green] ({len(source)} bytes)")
        return 0
    console.print(
        f"[red]Mismatch[/red] at offset 0x{diff:X} "
        f"(source {len(source)} bytes, encoded {len(encoded)} bytes)"
    )
    return 1


# ---- Zone commands ----

def _payload_summary(payload) -> tuple[str, str]:
    if isinstance(payload, ZoneModel):
        mesh = payload.collision_mesh
        return "model", (
            f"grid {payload.grid_width}x{payload.grid_height}, "
            f"{len(mesh.grid_entries)} cells, {mesh.mesh_count} meshes, "
            f"{mesh.triangle_count} triangles"
        )
    if isinstance(payload, ZoneMmb):
        return "mmb", f"{len(payload.blocks)} blocks, {payload.model_count} models"
    if isinstance(payload, UnknownChunk):
        return "raw", f"{len(payload.data)} bytes"
    return type(payload).__name__, ""


def cmd_zone_dump(args: argparse.Namespace) -> int:
    zone = ZoneData.from_path(args.file, _config(args))

    t = Table(title=f"Chunks in {args.file}")
    t.add_column("#", justify="right")
    t.add_column("Tag")
    t.add_column("Type")
    t.add_column("Length", justify="right")
    t.add_column("Decoded")
    t.add_column("Details", overflow="fold")
    for i, chunk in enumerate(zone.chunks):
        kind, details = _payload_summary(chunk.payload)
        t.add_row(
            str(i), chunk.tag, f"{hex_byte(chunk.chunk_type)} {chunk.type_name}",
            str(chunk.length), kind, details,
        )
    console.print(t)

    if args.out:
        _write_json(args.out, zone.to_dict())
    return 0


# ---- Opcode registry ----

def cmd_opcodes(args: argparse.Namespace) -> int:
    if args.opcode is not None:
        selected = [parse_hex_byte(args.opcode)]
    else:
        selected = sorted(KNOWN_OPCODES)

    t = Table(title="Event opcodes")
    t.add_column("Opcode")
    t.add_column("Sizes")
    t.add_column("Resolver", justify="center")
    t.add_column("Description", overflow="fold")
    for opcode in selected:
        odef = KNOWN_OPCODES.get(opcode)
        if odef is None:
            console.print(f"[yellow]No definition for opcode {hex_byte(opcode)}[/yellow]")
            return 1
        t.add_row(
            hex_byte(opcode),
            ", ".join(str(s) for s in odef.sizes),
            "yes" if odef.resolver else "-",
            odef.description,
        )
    console.print(t)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xidat",
        description="Decode and re-encode game DAT resource files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    def heuristics(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--no-lookahead", action="store_true",
                        help="Disable the next-opcode lookahead size heuristic")
        sp.add_argument("--no-resolvers", action="store_true",
                        help="Disable per-opcode size resolvers")

    s = sub.add_parser("event-dump", help="Decode an event DAT and print coverage")
    s.add_argument("file")
    s.add_argument("-o", "--out", help="Write the decoded file as JSON")
    s.add_argument("--blocks", action="store_true", help="List every block (with -v, hex dumps of raw series)")
    heuristics(s)
    s.set_defaults(fn=cmd_event_dump)

    b = sub.add_parser("event-build", help="Encode a JSON dump back into an event DAT")
    b.add_argument("file")
    b.add_argument("-o", "--out", required=True)
    b.add_argument("--recompute-sizes", action="store_true",
                   help="Write block sizes from the encoded blocks instead of the header")
    b.set_defaults(fn=cmd_event_build)

    r = sub.add_parser("event-roundtrip", help="Decode, re-encode and compare an event DAT")
    r.add_argument("file")
    heuristics(r)
    r.set_defaults(fn=cmd_event_roundtrip)

    z = sub.add_parser("zone-dump", help="List the chunks of a zone DAT")
    z.add_argument("file")
    z.add_argument("-o", "--out", help="Write the decoded chunks as JSON")
    z.add_argument("--lenient-mesh", action="store_true",
                   help="Log collision mesh offset mismatches instead of failing")
    z.set_defaults(fn=cmd_zone_dump)

    o = sub.add_parser("opcodes", help="Show the event opcode registry")
    o.add_argument("--opcode", help="Single opcode, e.g. 0x46")
    o.set_defaults(fn=cmd_opcodes)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        return int(args.fn(args))
    except DatError as e:
        log.error("%s: %s", type(e).__name__, e)
        return 1
    except (OSError, ValueError) as e:
        log.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
