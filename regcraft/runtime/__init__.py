"""
Live register values bound to their definitions.

For the definitions themselves, use regcraft.model instead.
"""

from .register_value import BoundField, RegisterValue, format_hex_value, parse_hex_value

__all__ = [
    "RegisterValue",
    "BoundField",
    "parse_hex_value",
    "format_hex_value",
]
