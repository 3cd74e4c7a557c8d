"""Shared utility helpers for regcraft."""

import math
import re
from enum import Enum
from typing import Any, Tuple


def parse_bit_range(bits_str: str) -> Tuple[int, int]:
    """Parse bit notation like ``[7:4]`` or ``[0]`` into ``(msb, lsb)``.

    Args:
        bits_str: Bit notation string.

    Returns:
        Tuple of ``(msb, lsb)``.

    Raises:
        ValueError: If notation is empty or invalid.
    """
    if not bits_str:
        raise ValueError("Empty bit range notation")

    clean = bits_str.strip().strip("[]").strip()

    match_range = re.fullmatch(r"(\d+)\s*:\s*(\d+)", clean)
    if match_range:
        return int(match_range.group(1)), int(match_range.group(2))

    match_single = re.fullmatch(r"(\d+)", clean)
    if match_single:
        bit = int(match_single.group(1))
        return bit, bit

    raise ValueError(f"Invalid bit range notation: '{bits_str}'")


def format_bit_range(msb: int, lsb: int) -> str:
    """Format a bit range as ``[msb:lsb]`` (or ``[bit]`` for one bit)."""
    if msb == lsb:
        return f"[{lsb}]"
    return f"[{msb}:{lsb}]"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero.

    ``value`` must be finite. A ``Fraction`` is rounded exactly.
    """
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return -whole if value < 0 else whole


def format_offset(offset: int) -> str:
    """Format an address offset as upper-case hex, at least two digits."""
    return f"0x{offset:02X}"


def format_binary(bin_str: str) -> str:
    """Insert a space every 4 characters from the right.

    Example:
        >>> format_binary("110101101011")
        '1101 0110 1011'
    """
    if not bin_str:
        return ""
    parts = []
    end = len(bin_str)
    while end > 0:
        start = max(0, end - 4)
        parts.insert(0, bin_str[start:end])
        end = start
    return " ".join(parts)


def enum_value(v: Any) -> str:
    """Extract the string value from an Enum member or return str(v)."""
    return v.value if isinstance(v, Enum) else str(v)


def filter_none(data: dict) -> dict:
    """Remove keys with None values from a dictionary.

    Required for Pydantic v2 compatibility: passing None explicitly
    to fields with defaults causes validation errors. Filtering None
    values lets Pydantic use its own defaults.
    """
    return {k: v for k, v in data.items() if v is not None}
