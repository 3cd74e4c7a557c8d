"""
Register and bit-field definitions.

These are Pydantic models describing the *shape* of a register: its width,
optional address offset and ordered list of typed fields. They hold no
value; use :mod:`regcraft.codec` to decode/encode raw values against them
and :class:`regcraft.runtime.RegisterValue` for a live value.

Fields form a discriminated union on ``type``. Each variant carries only
the parameters relevant to it (enum entries, signedness, float precision,
Q format), so that e.g. an integer field cannot carry a Q format.

Range checks (width limits, MSB/LSB ordering, width/type mismatch) are
deliberately *not* enforced here. A definition that fails them must still
load so it can be decoded and corrected; see
:mod:`regcraft.model.validators` for those checks.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Field, model_validator

from regcraft.utils import format_bit_range, format_offset, parse_bit_range

from .base import FlexibleModel, StrictModel, new_id

MAX_REGISTER_WIDTH = 256


class FieldType(str, Enum):
    """Semantic type of a bit field."""

    FLAG = "flag"
    ENUM = "enum"
    INTEGER = "integer"
    FLOAT = "float"
    FIXED_POINT = "fixed-point"


class Signedness(str, Enum):
    """Integer encodings supported by integer fields."""

    UNSIGNED = "unsigned"
    TWOS_COMPLEMENT = "twos-complement"
    SIGN_MAGNITUDE = "sign-magnitude"


class FloatType(str, Enum):
    """IEEE-754 precision classes."""

    HALF = "half"
    SINGLE = "single"
    DOUBLE = "double"

    @property
    def bit_width(self) -> int:
        """Storage width in bits for this precision."""
        return {FloatType.HALF: 16, FloatType.SINGLE: 32, FloatType.DOUBLE: 64}[self]


class EnumEntry(StrictModel):
    """One named value of an enumerated field."""

    value: int = Field(..., description="Numeric value")
    name: str = Field(..., description="Symbolic name")


class QFormat(StrictModel):
    """Qm.n fixed-point format: m integer bits, n fractional bits."""

    m: int = Field(default=0, description="Integer bits (including sign)")
    n: int = Field(default=0, description="Fractional bits")

    @property
    def total_bits(self) -> int:
        return self.m + self.n

    def __str__(self) -> str:
        return f"Q{self.m}.{self.n}"


class FlagLabels(StrictModel):
    """Display labels for the two states of a flag."""

    clear: str
    set: str


class _FieldBase(FlexibleModel):
    """Attributes shared by every field variant."""

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(default="", description="Field name")
    description: Optional[str] = Field(default=None, description="Field description")
    msb: int = Field(default=0, description="Most significant bit (inclusive)")
    lsb: int = Field(default=0, description="Least significant bit (inclusive)")

    @model_validator(mode="before")
    @classmethod
    def parse_bits_notation(cls, data: Any) -> Any:
        """Accept ``bits: "[7:4]"`` as shorthand for msb/lsb."""
        if not isinstance(data, dict):
            return data

        bits_val = data.get("bits")
        if bits_val is not None and "msb" not in data and "lsb" not in data:
            data = dict(data)
            data["msb"], data["lsb"] = parse_bit_range(str(bits_val))
        return data

    @property
    def bit_width(self) -> int:
        """Number of bits covered by the field."""
        return self.msb - self.lsb + 1

    @property
    def bit_range(self) -> str:
        """Bit range as string (e.g. ``[7:0]``)."""
        return format_bit_range(self.msb, self.lsb)

    def overlaps(self, other: "_FieldBase") -> bool:
        """True if the two fields share at least one bit."""
        return self.lsb <= other.msb and other.lsb <= self.msb


class FlagFieldDef(_FieldBase):
    """Boolean field; true iff any of its bits is set."""

    type: Literal["flag"] = "flag"
    flag_labels: Optional[FlagLabels] = Field(default=None, description="State labels")


class EnumFieldDef(_FieldBase):
    """Field whose numeric value maps to a symbolic name."""

    type: Literal["enum"] = "enum"
    enum_entries: List[EnumEntry] = Field(default_factory=list, description="Ordered entries")

    def lookup(self, value: int) -> Optional[str]:
        """Return the name of the first entry matching ``value``, if any."""
        for entry in self.enum_entries:
            if entry.value == value:
                return entry.name
        return None


class IntegerFieldDef(_FieldBase):
    """Plain integer field in one of three encodings."""

    type: Literal["integer"] = "integer"
    signedness: Signedness = Field(default=Signedness.UNSIGNED, description="Integer encoding")

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_signed(cls, data: Any) -> Any:
        """Map the legacy ``signed: bool`` flag onto ``signedness``."""
        if not isinstance(data, dict) or "signedness" in data:
            return data
        signed = data.get("signed")
        if isinstance(signed, bool):
            data = dict(data)
            data["signedness"] = (
                Signedness.TWOS_COMPLEMENT if signed else Signedness.UNSIGNED
            )
        return data


class FloatFieldDef(_FieldBase):
    """IEEE-754 floating point field."""

    type: Literal["float"] = "float"
    float_type: FloatType = Field(default=FloatType.SINGLE, description="Precision class")


class FixedPointFieldDef(_FieldBase):
    """Signed Qm.n fixed-point field."""

    type: Literal["fixed-point"] = "fixed-point"
    q_format: QFormat = Field(default_factory=QFormat, description="Qm.n format")


FieldDef = Annotated[
    Union[FlagFieldDef, EnumFieldDef, IntegerFieldDef, FloatFieldDef, FixedPointFieldDef],
    Field(discriminator="type"),
]

class RegisterDef(FlexibleModel):
    """
    Register definition: total width plus ordered, typed bit fields.

    ``offset`` is expressed in address units (bytes by default) and is
    only needed for placing the register in an address map.
    """

    id: str = Field(default_factory=new_id, description="Stable opaque identifier")
    name: str = Field(default="", description="Register name")
    description: Optional[str] = Field(default=None, description="Register description")
    width: int = Field(default=32, description="Register width in bits")
    offset: Optional[int] = Field(default=None, description="Address offset in address units")
    fields: List[FieldDef] = Field(default_factory=list, description="Bit fields")

    @property
    def mask(self) -> int:
        """All-ones mask covering the register width."""
        return (1 << self.width) - 1 if self.width > 0 else 0

    @property
    def hex_offset(self) -> Optional[str]:
        """Offset as hex string, or None when the register is unplaced."""
        if self.offset is None:
            return None
        return format_offset(self.offset)

    def unit_size(self, address_unit_bits: int = 8) -> int:
        """Number of address units the register occupies."""
        return -(-self.width // address_unit_bits)

    def get_field(self, name: str):
        """Find a field by name.

        Raises:
            KeyError: If no field has that name.
        """
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(f"Field '{name}' not found in register '{self.name}'")
