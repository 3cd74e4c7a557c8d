"""
Address-map geometry: tiling offset-bearing registers into fixed-width bands.

A band covers ``row_width_units`` consecutive address units and becomes
one row of the map table. Each row is a left-to-right sequence of gap
cells (units no register owns) and register cells. A register wider than
one band is split into one cell per band, each tagged with its position
in the span.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Union

from regcraft.model.project import ADDRESS_UNIT_BITS_DEFAULT, MAP_TABLE_WIDTH_DEFAULT
from regcraft.model.register import RegisterDef
from regcraft.model.validators import RegisterOverlapWarning, get_register_overlap_warnings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapRegister:
    """A placed register with its address-unit extent."""

    register: RegisterDef
    start_unit: int
    end_unit: int  # inclusive
    unit_size: int
    has_overlap: bool
    color_index: int


@dataclass(frozen=True)
class FieldSegment:
    """The part of a field that falls inside one register cell."""

    field: object
    field_index: int
    clamped_msb: int
    clamped_lsb: int
    width_bits: int
    is_partial: bool


@dataclass(frozen=True)
class RegisterCell:
    map_register: MapRegister
    row_span_index: int
    total_row_spans: int
    col_start: int  # 1-based
    col_end: int  # exclusive
    field_segments: List[FieldSegment]
    cell_start_bit: int
    cell_end_bit: int  # inclusive

    kind = "register"


@dataclass(frozen=True)
class GapCell:
    start_unit: int
    end_unit: int
    col_start: int
    col_end: int

    kind = "gap"


MapCell = Union[RegisterCell, GapCell]


@dataclass(frozen=True)
class MapRow:
    band_start: int
    band_end: int
    cells: List[MapCell] = field(default_factory=list)
    is_gap_row: bool = False


def get_overlap_warning_ids(warnings: Sequence[RegisterOverlapWarning]) -> Set[str]:
    """Flatten overlap warnings into the set of register ids involved."""
    ids = set()
    for warning in warnings:
        ids.update(warning.register_ids)
    return ids


def build_map_registers(
    registers: Sequence[RegisterDef],
    overlap_ids: Set[str],
    address_unit_bits: int = ADDRESS_UNIT_BITS_DEFAULT,
) -> List[MapRegister]:
    """Placed registers sorted by offset; unplaced registers are dropped."""
    placed = sorted((r for r in registers if r.offset is not None), key=lambda r: r.offset)
    result = []
    for idx, reg in enumerate(placed):
        unit_size = reg.unit_size(address_unit_bits)
        result.append(
            MapRegister(
                register=reg,
                start_unit=reg.offset,
                end_unit=reg.offset + max(unit_size, 1) - 1,
                unit_size=unit_size,
                has_overlap=reg.id in overlap_ids,
                color_index=idx,
            )
        )
    return result


def compute_field_segments(
    register: RegisterDef,
    cell_start_unit: int,
    cell_end_unit: int,
    address_unit_bits: int = ADDRESS_UNIT_BITS_DEFAULT,
) -> List[FieldSegment]:
    """
    Field portions inside the units ``cell_start_unit..cell_end_unit``.

    Returned MSB first, i.e. left to right as drawn.
    """
    if not register.fields or register.offset is None:
        return []

    cell_start_bit = (cell_start_unit - register.offset) * address_unit_bits
    cell_end_bit = (cell_end_unit - register.offset + 1) * address_unit_bits - 1

    segments = []
    for idx, fld in enumerate(register.fields):
        if fld.lsb > cell_end_bit or fld.msb < cell_start_bit:
            continue
        clamped_msb = min(fld.msb, cell_end_bit)
        clamped_lsb = max(fld.lsb, cell_start_bit)
        segments.append(
            FieldSegment(
                field=fld,
                field_index=idx,
                clamped_msb=clamped_msb,
                clamped_lsb=clamped_lsb,
                width_bits=clamped_msb - clamped_lsb + 1,
                is_partial=fld.msb > cell_end_bit or fld.lsb < cell_start_bit,
            )
        )

    segments.sort(key=lambda s: s.clamped_msb, reverse=True)
    return segments


def _gap_cell(start: int, end: int, band_start: int) -> GapCell:
    return GapCell(
        start_unit=start,
        end_unit=end,
        col_start=start - band_start + 1,
        col_end=end - band_start + 2,
    )


def compute_map_rows(
    map_registers: Sequence[MapRegister],
    row_width_units: int,
    show_gaps: bool,
    address_unit_bits: int = ADDRESS_UNIT_BITS_DEFAULT,
    descending: bool = False,
) -> List[MapRow]:
    """
    Band ``map_registers`` (sorted by offset) into rows.

    Bands with no register become empty gap rows when ``show_gaps`` is set
    and are skipped otherwise. ``descending`` returns the highest band first.
    """
    if not map_registers:
        return []
    if row_width_units < 1:
        raise ValueError(f"row_width_units must be positive (got {row_width_units})")

    min_unit = min(mr.start_unit for mr in map_registers)
    max_unit = max(mr.end_unit for mr in map_registers)
    first_band = (min_unit // row_width_units) * row_width_units
    last_band = (max_unit // row_width_units) * row_width_units

    rows = []
    for band_start in range(first_band, last_band + 1, row_width_units):
        band_end = band_start + row_width_units - 1

        in_band = [
            mr for mr in map_registers if mr.start_unit <= band_end and mr.end_unit >= band_start
        ]
        if not in_band:
            if show_gaps:
                rows.append(MapRow(band_start, band_end, [], is_gap_row=True))
            continue

        in_band.sort(key=lambda mr: max(mr.start_unit, band_start))

        cells = []
        cursor = band_start
        for mr in in_band:
            clamped_start = max(mr.start_unit, band_start)
            clamped_end = min(mr.end_unit, band_end)

            if clamped_start > cursor:
                cells.append(_gap_cell(cursor, clamped_start - 1, band_start))

            reg_first_band = (mr.start_unit // row_width_units) * row_width_units
            offset = mr.register.offset
            cells.append(
                RegisterCell(
                    map_register=mr,
                    row_span_index=(band_start - reg_first_band) // row_width_units,
                    total_row_spans=-(-(mr.end_unit - reg_first_band + 1) // row_width_units),
                    col_start=clamped_start - band_start + 1,
                    col_end=clamped_end - band_start + 2,
                    field_segments=compute_field_segments(
                        mr.register, clamped_start, clamped_end, address_unit_bits
                    ),
                    cell_start_bit=(clamped_start - offset) * address_unit_bits,
                    cell_end_bit=(clamped_end - offset + 1) * address_unit_bits - 1,
                )
            )
            # overlapping registers may end before the cursor
            cursor = max(cursor, clamped_end + 1)

        if cursor <= band_end:
            cells.append(_gap_cell(cursor, band_end, band_start))

        rows.append(MapRow(band_start, band_end, cells))

    if descending:
        rows.reverse()
    return rows


def build_register_map(
    registers: Sequence[RegisterDef],
    map_table_width: int = MAP_TABLE_WIDTH_DEFAULT,
    address_unit_bits: int = ADDRESS_UNIT_BITS_DEFAULT,
    show_gaps: bool = False,
    descending: bool = False,
    warnings: Optional[List[RegisterOverlapWarning]] = None,
) -> List[MapRow]:
    """
    Detect register overlaps and band the placed registers.

    ``map_table_width`` is the band width in bits; it is converted to
    address units (at least one unit per band).
    """
    if warnings is None:
        warnings = get_register_overlap_warnings(registers, address_unit_bits)
    if warnings:
        logger.debug("%d register overlap(s) in map", len(warnings))

    map_registers = build_map_registers(
        registers, get_overlap_warning_ids(warnings), address_unit_bits
    )
    row_width_units = max(1, map_table_width // address_unit_bits)
    return compute_map_rows(
        map_registers, row_width_units, show_gaps, address_unit_bits, descending
    )
