"""
Bit-grid geometry for displaying a single register.

A register's bits are laid out MSB first, in rows of ``bits_per_row``.
Inside a row every bit gets a grid column. Bits are grouped in eights
counted from the row's own LSB end, with a narrow gap column between
groups. When a row is not a multiple of 8 bits wide its first (MSB side)
group is the short one. Gaps follow the row, not absolute bit positions:
a 12-bit row covering bits 23..12 groups as 23..20 and 19..12.

All column numbers are 1-based and ``end_col`` values are exclusive, which
is what CSS ``grid-column: start / end`` expects.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple

CELL_PX = 32
GAP_PX = 8
MIN_BITS_PER_ROW = 8
CELL_TRACK = "2rem"
GAP_TRACK = "0.5rem"


@dataclass(frozen=True)
class BitRow:
    """One row of bits, MSB first. ``start_bit >= end_bit``."""

    bits: Tuple[int, ...]
    start_bit: int
    end_bit: int

    @property
    def size(self) -> int:
        return len(self.bits)


@dataclass(frozen=True)
class FieldInRow:
    field: object
    field_index: int
    start_col: int
    end_col: int
    is_partial: bool


@dataclass(frozen=True)
class UnassignedRange:
    start_bit: int
    end_bit: int
    start_col: int
    end_col: int


@dataclass(frozen=True)
class NibbleInRow:
    """A 4-bit hex group (or the part of one) that falls inside a row.

    ``field_index`` is set only when a single field owns every bit of the
    segment; ``field_indices`` lists every field touching it.
    """

    nibble_index: int
    hex_digit: str
    start_bit: int
    end_bit: int
    start_col: int
    end_col: int
    is_partial: bool
    field_index: Optional[int] = None
    field_indices: FrozenSet[int] = frozenset()


@dataclass(frozen=True)
class BitGridRow:
    row: BitRow
    template_columns: str
    fields: List[FieldInRow] = field(default_factory=list)
    unassigned: List[UnassignedRange] = field(default_factory=list)
    nibbles: List[NibbleInRow] = field(default_factory=list)


@dataclass(frozen=True)
class BitGrid:
    bits_per_row: int
    rows: List[BitGridRow]


def _width_needed(bits: int, cell_px: int, gap_px: int) -> int:
    gaps = max(0, -(-bits // 8) - 1)
    return bits * cell_px + gaps * gap_px


def compute_bits_per_row(
    container_width: int,
    register_width: int,
    cell_px: int = CELL_PX,
    gap_px: int = GAP_PX,
) -> int:
    """
    Largest row width that fits ``container_width`` pixels.

    Tries the full register width first, then steps down in multiples of 8.
    Never goes below 8 bits (or the register width, if narrower). A
    non-positive container width means "unknown" and returns the register
    width unchanged.
    """
    if container_width <= 0:
        return register_width

    if _width_needed(register_width, cell_px, gap_px) <= container_width:
        return register_width

    n = register_width - (register_width % 8 or 8)
    while n >= MIN_BITS_PER_ROW:
        if _width_needed(n, cell_px, gap_px) <= container_width:
            return n
        n -= 8

    return min(MIN_BITS_PER_ROW, register_width)


def build_row_bits(register_width: int, bits_per_row: int) -> List[BitRow]:
    """Chunk bits ``register_width-1 .. 0`` into rows of ``bits_per_row``."""
    bits_per_row = max(1, bits_per_row)
    rows = []
    start = register_width - 1
    while start >= 0:
        end = max(start - bits_per_row + 1, 0)
        rows.append(BitRow(tuple(range(start, end - 1, -1)), start, end))
        start = end - 1
    return rows


def bit_to_grid_column(bit: int, row_start_bit: int, bits_in_row: int) -> int:
    """Map a bit index to its 1-based grid column, skipping gap columns."""
    pos = row_start_bit - bit
    first_group = bits_in_row % 8 or 8
    if pos < first_group:
        return pos + 1
    gaps_before = 1 + (pos - first_group) // 8
    return pos + gaps_before + 1


def grid_template_columns(bits_in_row: int) -> str:
    """CSS ``grid-template-columns`` value for a row of ``bits_in_row`` bits."""
    if bits_in_row <= 0:
        return ""

    first_group = bits_in_row % 8 or 8
    parts = [CELL_TRACK if first_group == 1 else f"repeat({first_group}, {CELL_TRACK})"]
    remaining = bits_in_row - first_group

    while remaining > 0:
        parts.append(GAP_TRACK)
        parts.append(f"repeat({min(remaining, 8)}, {CELL_TRACK})")
        remaining -= 8

    return " ".join(parts)


def fields_for_row(row: BitRow, fields: Sequence) -> List[FieldInRow]:
    """Fields intersecting ``row``, clamped to it, in definition order."""
    result = []
    for idx, fld in enumerate(fields):
        if fld.lsb > row.start_bit or fld.msb < row.end_bit:
            continue

        clamped_msb = min(fld.msb, row.start_bit)
        clamped_lsb = max(fld.lsb, row.end_bit)
        result.append(
            FieldInRow(
                field=fld,
                field_index=idx,
                start_col=bit_to_grid_column(clamped_msb, row.start_bit, row.size),
                end_col=bit_to_grid_column(clamped_lsb, row.start_bit, row.size) + 1,
                is_partial=fld.msb > row.start_bit or fld.lsb < row.end_bit,
            )
        )
    return result


def _covering_fields(bit: int, fields: Sequence) -> List[int]:
    return [idx for idx, fld in enumerate(fields) if fld.lsb <= bit <= fld.msb]


def unassigned_ranges_for_row(row: BitRow, fields: Sequence) -> List[UnassignedRange]:
    """Contiguous runs of bits in ``row`` that no field covers, MSB first."""
    ranges = []
    run_start = None

    def close(run_end: int) -> None:
        ranges.append(
            UnassignedRange(
                start_bit=run_start,
                end_bit=run_end,
                start_col=bit_to_grid_column(run_start, row.start_bit, row.size),
                end_col=bit_to_grid_column(run_end, row.start_bit, row.size) + 1,
            )
        )

    for bit in row.bits:
        if _covering_fields(bit, fields):
            if run_start is not None:
                close(bit + 1)
                run_start = None
        elif run_start is None:
            run_start = bit

    if run_start is not None:
        close(row.end_bit)
    return ranges


def nibbles_for_row(
    row: BitRow, register_width: int, value: int, fields: Sequence = ()
) -> List[NibbleInRow]:
    """
    Hex-digit groups for ``row``.

    Nibble ``k`` covers bits ``4k+3 .. 4k``, clipped to the register's MSB.
    A nibble split across rows (or clipped by the MSB) appears in each row
    with ``is_partial`` set; its digit is always the whole nibble's value.
    """
    if not row.bits:
        return []

    result = []
    high_nibble = row.start_bit // 4
    low_nibble = row.end_bit // 4
    for k in range(high_nibble, low_nibble - 1, -1):
        seg_msb = min(4 * k + 3, row.start_bit, register_width - 1)
        seg_lsb = max(4 * k, row.end_bit)
        if seg_msb < seg_lsb:
            continue

        digit = (value >> (4 * k)) & 0xF
        if 4 * k + 3 >= register_width:
            digit &= (1 << max(0, register_width - 4 * k)) - 1

        owners = [_covering_fields(bit, fields) for bit in range(seg_msb, seg_lsb - 1, -1)]
        indices = frozenset(idx for bit_owners in owners for idx in bit_owners)
        single_owner = None
        if all(len(bit_owners) == 1 for bit_owners in owners) and len(indices) == 1:
            single_owner = next(iter(indices))

        result.append(
            NibbleInRow(
                nibble_index=k,
                hex_digit=f"{digit:X}",
                start_bit=seg_msb,
                end_bit=seg_lsb,
                start_col=bit_to_grid_column(seg_msb, row.start_bit, row.size),
                end_col=bit_to_grid_column(seg_lsb, row.start_bit, row.size) + 1,
                is_partial=seg_msb - seg_lsb + 1 < 4,
                field_index=single_owner,
                field_indices=indices,
            )
        )
    return result


def build_bit_grid(register, value: int = 0, container_width: int = 0) -> BitGrid:
    """Assemble every per-row structure for ``register`` holding ``value``."""
    bits_per_row = compute_bits_per_row(container_width, register.width)
    rows = []
    for row in build_row_bits(register.width, bits_per_row):
        rows.append(
            BitGridRow(
                row=row,
                template_columns=grid_template_columns(row.size),
                fields=fields_for_row(row, register.fields),
                unassigned=unassigned_ranges_for_row(row, register.fields),
                nibbles=nibbles_for_row(row, register.width, value, register.fields),
            )
        )
    return BitGrid(bits_per_row=bits_per_row, rows=rows)
