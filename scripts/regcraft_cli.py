#!/usr/bin/env python3
"""
regcraft - bit-field register codec and layout tool.

Usage:
    python scripts/regcraft_cli.py validate project.yml
    python scripts/regcraft_cli.py decode project.yml STATUS_REG --value 0x18000105
    python scripts/regcraft_cli.py encode project.yml STATUS_REG MODE=2 GAIN=1.5
    python scripts/regcraft_cli.py grid project.yml STATUS_REG --container-width 600
    python scripts/regcraft_cli.py map project.yml --table-width 32 --show-gaps --json

Subcommands:
    init        Write an example project file
    validate    Validate every register in a project file
    decode      Decode a register value field by field
    encode      Encode field values into a register value
    grid        Show the bit-grid rows of one register
    map         Show the banded address map of a project
"""
import argparse
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from regcraft.codec.field_codec import format_decoded_value
from regcraft.layout.bit_grid import build_bit_grid
from regcraft.layout.map_layout import GapCell, build_register_map
from regcraft.model.project import MAP_TABLE_WIDTH_DEFAULT, MAP_TABLE_WIDTH_VALUES, Project
from regcraft.model.validators import (
    RegisterValidator,
    get_register_overlap_warnings,
)
from regcraft.parser.project_parser import (
    ProjectParser,
    create_seed_registers,
    dump_project,
)
from regcraft.runtime.register_value import RegisterValue, parse_hex_value
from regcraft.utils import enum_value, format_binary


def fail(args, error) -> None:
    if args.json:
        print(json.dumps({"success": False, "error": str(error)}))
    else:
        print(f"Error: {error}")
    sys.exit(1)


def load_project(args) -> Project:
    result = ProjectParser().parse_file(args.input)
    if result.warnings and not args.json:
        for warning in result.warnings:
            print(
                f"Warning: skipped register {warning.register_name} "
                f"({len(warning.errors)} error(s))"
            )
    return result.project


def current_value(args, project: Project, register) -> RegisterValue:
    if getattr(args, "value", None) is not None:
        return RegisterValue(register, parse_hex_value(args.value, register.width))
    return RegisterValue(register, project.value_of(register))


def dump_format(path: Path) -> str:
    return "json" if path.suffix.lower() == ".json" else "yaml"


def field_kind(field) -> str:
    """Field type plus its encoding, e.g. ``integer/twos-complement``."""
    detail = (
        getattr(field, "signedness", None)
        or getattr(field, "float_type", None)
        or getattr(field, "q_format", None)
    )
    if detail is None:
        return field.type
    return f"{field.type}/{enum_value(detail)}"


def cmd_init(args):
    """Write an example project file."""
    output = Path(args.output)
    if output.exists() and not args.force:
        fail(args, f"Output file exists: {output} (use --force to overwrite)")

    project = Project(registers=create_seed_registers())
    output.write_text(dump_project(project, dump_format(output)), encoding="utf-8")

    if args.json:
        print(json.dumps({"success": True, "output": str(output)}))
    else:
        print(f"✓ Generated: {output}")


def cmd_validate(args):
    """Validate every register in a project file."""
    try:
        parser = ProjectParser()
        result = parser.parse_file(args.input)
    except Exception as e:
        fail(args, e)

    project = result.project
    reports = []
    has_errors = bool(result.warnings)
    for register in project.registers:
        validator = RegisterValidator(register)
        has_errors |= not validator.validate_all()
        reports.append((register, validator))
    overlaps = get_register_overlap_warnings(project.registers, project.address_unit_bits)

    if args.json:
        print(
            json.dumps(
                {
                    "success": not has_errors,
                    "skipped": [
                        {
                            "index": w.register_index,
                            "name": w.register_name,
                            "errors": [e.message for e in w.errors],
                        }
                        for w in result.warnings
                    ],
                    "registers": {
                        reg.name: {
                            "errors": [e.message for e in v.errors],
                            "warnings": [w.message for w in v.warnings],
                        }
                        for reg, v in reports
                    },
                    "overlaps": [o.message for o in overlaps],
                }
            )
        )
    else:
        for warning in result.warnings:
            print(f"\n✗ Skipped register {warning.register_name}:")
            for err in warning.errors:
                print(f"  [ERROR] {err.location}: {err.message}")
        for register, validator in reports:
            print(f"\n{register.name}:{validator.get_error_summary()}")
        for overlap in overlaps:
            print(f"\n[WARNING] {overlap.message}")

    if has_errors:
        sys.exit(1)


def cmd_decode(args):
    """Decode a register value field by field."""
    try:
        project = load_project(args)
        register = project.get_register(args.register)
        value = current_value(args, project, register)
    except Exception as e:
        fail(args, e)

    formatted = value.format_all()
    if args.json:
        print(json.dumps({"success": True, "value": value.to_hex(), "fields": formatted}))
    else:
        bits = format(value.read(), f"0{register.width}b")
        print(f"\n{register.name} = {value.to_hex()}")
        print(f"  {format_binary(bits)}")
        for field in register.fields:
            print(
                f"  {field.name:20} {field.bit_range:10} {field_kind(field):26} "
                f"{formatted[field.name]}"
            )


def cmd_encode(args):
    """Encode field values into a register value."""
    try:
        project = load_project(args)
        register = project.get_register(args.register)
        value = current_value(args, project, register)

        assignments = {}
        for item in args.assignments:
            name, sep, text = item.partition("=")
            if not sep:
                raise ValueError(f"Expected FIELD=VALUE, got '{item}'")
            assignments[name] = text
        value.write_fields(assignments)

        if args.save:
            project.values[register.id] = value.read()
            path = Path(args.input)
            path.write_text(dump_project(project, dump_format(path)), encoding="utf-8")
    except Exception as e:
        fail(args, e)

    if args.json:
        print(json.dumps({"success": True, "value": value.to_hex(), "fields": value.format_all()}))
    else:
        print(value.to_hex())


def cmd_grid(args):
    """Show the bit-grid rows of one register."""
    try:
        project = load_project(args)
        register = project.get_register(args.register)
        value = current_value(args, project, register)
    except Exception as e:
        fail(args, e)

    grid = build_bit_grid(register, value.read(), args.container_width)

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "bitsPerRow": grid.bits_per_row,
                    "rows": [
                        {
                            "startBit": r.row.start_bit,
                            "endBit": r.row.end_bit,
                            "templateColumns": r.template_columns,
                            "hex": "".join(n.hex_digit for n in r.nibbles),
                            "fields": [
                                {
                                    "name": f.field.name,
                                    "startCol": f.start_col,
                                    "endCol": f.end_col,
                                    "isPartial": f.is_partial,
                                }
                                for f in r.fields
                            ],
                            "unassigned": [[u.start_bit, u.end_bit] for u in r.unassigned],
                        }
                        for r in grid.rows
                    ],
                }
            )
        )
        return

    print(f"\n{register.name} ({register.width} bits, {grid.bits_per_row} per row)")
    for r in grid.rows:
        bits = "".join(str(value.get_bit(b)) for b in r.row.bits)
        hex_digits = " ".join(n.hex_digit for n in r.nibbles)
        print(f"\n  [{r.row.start_bit}:{r.row.end_bit}]  {bits}  ({hex_digits})")
        for f in r.fields:
            partial = " (partial)" if f.is_partial else ""
            print(f"    cols {f.start_col:>2}-{f.end_col - 1:<2}  {f.field.name}{partial}")
        for u in r.unassigned:
            print(f"    cols {u.start_col:>2}-{u.end_col - 1:<2}  <unassigned>")


def cmd_map(args):
    """Show the banded address map of a project."""
    try:
        project = load_project(args)
    except Exception as e:
        fail(args, e)

    rows = build_register_map(
        project.registers,
        map_table_width=args.table_width,
        address_unit_bits=project.address_unit_bits,
        show_gaps=args.show_gaps,
        descending=args.descending,
    )

    def describe(cell):
        if isinstance(cell, GapCell):
            return {"kind": "gap", "startUnit": cell.start_unit, "endUnit": cell.end_unit}
        return {
            "kind": "register",
            "name": cell.map_register.register.name,
            "span": [cell.row_span_index, cell.total_row_spans],
            "colStart": cell.col_start,
            "colEnd": cell.col_end,
            "hasOverlap": cell.map_register.has_overlap,
            "fields": [s.field.name for s in cell.field_segments],
        }

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "rows": [
                        {
                            "bandStart": row.band_start,
                            "bandEnd": row.band_end,
                            "isGapRow": row.is_gap_row,
                            "cells": [describe(c) for c in row.cells],
                        }
                        for row in rows
                    ],
                }
            )
        )
        return

    for row in rows:
        label = f"0x{row.band_start:04X}-0x{row.band_end:04X}"
        if row.is_gap_row:
            print(f"  {label}  ...")
            continue
        parts = []
        for cell in row.cells:
            info = describe(cell)
            if info["kind"] == "gap":
                parts.append(f"<gap {info['endUnit'] - info['startUnit'] + 1}>")
            else:
                span = info["span"]
                suffix = f" {span[0] + 1}/{span[1]}" if span[1] > 1 else ""
                flag = " !" if info["hasOverlap"] else ""
                parts.append(f"{info['name']}{suffix}{flag}")
        print(f"  {label}  " + " | ".join(parts))


def main():
    parser = argparse.ArgumentParser(
        prog="regcraft", description="Bit-field register codec and layout tool"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init subcommand
    init_parser = subparsers.add_parser("init", help="Write an example project file")
    init_parser.add_argument("output", help="Project file to create (.yml or .json)")
    init_parser.add_argument(
        "--force", "-f", action="store_true", help="Overwrite existing output file"
    )
    init_parser.add_argument("--json", action="store_true", help="JSON output")
    init_parser.set_defaults(func=cmd_init)

    # validate subcommand
    val_parser = subparsers.add_parser("validate", help="Validate a project file")
    val_parser.add_argument("input", help="Project file")
    val_parser.add_argument("--json", action="store_true", help="JSON output")
    val_parser.set_defaults(func=cmd_validate)

    # decode subcommand
    dec_parser = subparsers.add_parser("decode", help="Decode a register value")
    dec_parser.add_argument("input", help="Project file")
    dec_parser.add_argument("register", help="Register name")
    dec_parser.add_argument("--value", help="Hex value (default: value stored in project)")
    dec_parser.add_argument("--json", action="store_true", help="JSON output")
    dec_parser.set_defaults(func=cmd_decode)

    # encode subcommand
    enc_parser = subparsers.add_parser("encode", help="Encode field values")
    enc_parser.add_argument("input", help="Project file")
    enc_parser.add_argument("register", help="Register name")
    enc_parser.add_argument("assignments", nargs="+", metavar="FIELD=VALUE")
    enc_parser.add_argument("--value", help="Starting hex value (default: value stored in project)")
    enc_parser.add_argument(
        "--save", action="store_true", help="Store the new value back into the project file"
    )
    enc_parser.add_argument("--json", action="store_true", help="JSON output")
    enc_parser.set_defaults(func=cmd_encode)

    # grid subcommand
    grid_parser = subparsers.add_parser("grid", help="Show the bit grid of a register")
    grid_parser.add_argument("input", help="Project file")
    grid_parser.add_argument("register", help="Register name")
    grid_parser.add_argument("--value", help="Hex value (default: value stored in project)")
    grid_parser.add_argument(
        "--container-width",
        type=int,
        default=0,
        help="Available width in pixels (default: 0, one row)",
    )
    grid_parser.add_argument("--json", action="store_true", help="JSON output")
    grid_parser.set_defaults(func=cmd_grid)

    # map subcommand
    map_parser = subparsers.add_parser("map", help="Show the address map")
    map_parser.add_argument("input", help="Project file")
    map_parser.add_argument(
        "--table-width",
        type=int,
        default=MAP_TABLE_WIDTH_DEFAULT,
        choices=MAP_TABLE_WIDTH_VALUES,
        help=f"Band width in bits (default: {MAP_TABLE_WIDTH_DEFAULT})",
    )
    map_parser.add_argument("--show-gaps", action="store_true", help="Show empty bands")
    map_parser.add_argument("--descending", action="store_true", help="Highest address first")
    map_parser.add_argument("--json", action="store_true", help="JSON output")
    map_parser.set_defaults(func=cmd_map)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
