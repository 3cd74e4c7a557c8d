"""
Display geometry: the bit grid of one register and the banded address map.
"""

from .bit_grid import (
    BitGrid,
    BitGridRow,
    BitRow,
    FieldInRow,
    NibbleInRow,
    UnassignedRange,
    bit_to_grid_column,
    build_bit_grid,
    build_row_bits,
    compute_bits_per_row,
    fields_for_row,
    grid_template_columns,
    nibbles_for_row,
    unassigned_ranges_for_row,
)
from .map_layout import (
    FieldSegment,
    GapCell,
    MapCell,
    MapRegister,
    MapRow,
    RegisterCell,
    build_map_registers,
    build_register_map,
    compute_field_segments,
    compute_map_rows,
    get_overlap_warning_ids,
)

__all__ = [
    # Bit grid
    "BitRow",
    "FieldInRow",
    "UnassignedRange",
    "NibbleInRow",
    "BitGridRow",
    "BitGrid",
    "compute_bits_per_row",
    "build_row_bits",
    "bit_to_grid_column",
    "grid_template_columns",
    "fields_for_row",
    "unassigned_ranges_for_row",
    "nibbles_for_row",
    "build_bit_grid",
    # Address map
    "MapRegister",
    "FieldSegment",
    "RegisterCell",
    "GapCell",
    "MapCell",
    "MapRow",
    "get_overlap_warning_ids",
    "build_map_registers",
    "compute_field_segments",
    "compute_map_rows",
    "build_register_map",
]
