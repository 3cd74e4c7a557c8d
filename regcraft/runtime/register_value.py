"""
Live register values.

A :class:`RegisterValue` pairs a register definition with its current raw
value and offers typed, field-level access to it. Field writes are
read-modify-write: only the target field's bits change.
"""

import logging
from typing import Dict, Mapping

from regcraft.codec.bits import extract_bits, get_bit, replace_bits, toggle_bit
from regcraft.codec.field_codec import (
    DecodedValue,
    FieldInput,
    decode_field,
    encode_field,
    format_decoded_value,
)
from regcraft.model.register import RegisterDef

logger = logging.getLogger(__name__)


def parse_hex_value(text: str, width: int) -> int:
    """Parse ``0x``-prefixed (or bare) hex, masked to ``width`` bits.

    Malformed text yields 0.
    """
    try:
        value = int(str(text).strip(), 16)
    except ValueError:
        logger.warning("Malformed hex value %r, using 0", text)
        return 0
    if value < 0:
        return 0
    return value & ((1 << width) - 1 if width > 0 else 0)


def format_hex_value(value: int) -> str:
    return f"0x{value:x}"


class BoundField:
    """
    Helper class to provide access to a specific field of a register value.
    """

    def __init__(self, register_value: "RegisterValue", name: str):
        self._register_value = register_value
        self._name = name

    def read(self) -> DecodedValue:
        return self._register_value.read_field(self._name)

    def write(self, value: FieldInput) -> None:
        self._register_value.write_field(self._name, value)

    def __int__(self) -> int:
        return self._register_value.read_raw_field(self._name)

    def __repr__(self) -> str:
        return format_decoded_value(self.read())


class RegisterValue:
    """
    Current value of one register.

    The value is always kept masked to the register width.
    """

    def __init__(self, register: RegisterDef, value: int = 0):
        self.register = register
        self._value = value & register.mask

    @property
    def value(self) -> int:
        return self._value

    def read(self) -> int:
        """Read the entire register value."""
        return self._value

    def write(self, value: int) -> None:
        """Write the entire register value, truncated to the register width."""
        masked = value & self.register.mask
        if masked != value:
            logger.debug(
                "Value 0x%x truncated to %d bits for register '%s'",
                value,
                self.register.width,
                self.register.name,
            )
        self._value = masked

    def reset_value(self) -> None:
        self._value = 0

    def __getitem__(self, field_name: str) -> BoundField:
        self.register.get_field(field_name)
        return BoundField(self, field_name)

    def read_raw_field(self, field_name: str) -> int:
        """Raw, right-aligned bits of a field."""
        field = self.register.get_field(field_name)
        return extract_bits(self._value, field.msb, field.lsb)

    def read_field(self, field_name: str) -> DecodedValue:
        """Decode a single field."""
        return decode_field(self._value, self.register.get_field(field_name))

    def write_field(self, field_name: str, value: FieldInput) -> None:
        """Encode ``value`` into a field (Read-Modify-Write)."""
        self.write_fields({field_name: value})

    def write_fields(self, field_values: Mapping[str, FieldInput]) -> None:
        """Write several fields in one update, in mapping order.

        Raises:
            KeyError: If any field name is unknown; nothing is written then.
        """
        fields = {name: self.register.get_field(name) for name in field_values}
        new_value = self._value
        for name, raw in field_values.items():
            field = fields[name]
            new_value = replace_bits(new_value, field.msb, field.lsb, encode_field(raw, field))
        logger.debug(
            "Register '%s': 0x%x -> 0x%x (%s)",
            self.register.name,
            self._value,
            new_value,
            ", ".join(field_values),
        )
        self.write(new_value)

    def toggle_bit(self, bit: int) -> None:
        if not 0 <= bit < self.register.width:
            raise ValueError(f"Bit {bit} outside register '{self.register.name}'")
        self._value = toggle_bit(self._value, bit)

    def get_bit(self, bit: int) -> int:
        return get_bit(self._value, bit)

    def decode_all(self) -> Dict[str, DecodedValue]:
        """Decode every field, keyed by field name."""
        return {field.name: decode_field(self._value, field) for field in self.register.fields}

    def format_all(self) -> Dict[str, str]:
        """Display text of every field, keyed by field name."""
        return {name: format_decoded_value(v) for name, v in self.decode_all().items()}

    def to_hex(self) -> str:
        return format_hex_value(self._value)

    @classmethod
    def from_hex(cls, register: RegisterDef, text: str) -> "RegisterValue":
        return cls(register, parse_hex_value(text, register.width))

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"RegisterValue({self.register.name!r}, {self.to_hex()})"
