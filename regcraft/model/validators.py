"""
Validation utilities for register definitions.

Provides the semantic checks that the Pydantic models deliberately leave
out (width limits, bit-range ordering, type/width agreement) plus pairwise
overlap detection, both between fields of one register and between
offset-bearing registers of an address map.

Nothing here raises on an invalid definition: problems are collected as
:class:`ValidationError` entries split into ``errors`` (hard) and
``warnings`` (soft). Decode/encode never consult them.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from regcraft.utils import format_offset

from .register import MAX_REGISTER_WIDTH, FieldType, RegisterDef


@dataclass
class ValidationError:
    """Validation error with context."""

    severity: str  # 'error', 'warning'
    message: str
    location: str  # e.g. 'register:CTRL', 'register:CTRL:field:EN'
    suggestion: str = ""
    field_id: Optional[str] = None


@dataclass
class RegisterOverlapWarning:
    """Two registers of a map whose address-unit spans intersect."""

    register_ids: Tuple[str, str]
    message: str


def find_field_overlaps(fields: Sequence) -> List[Tuple[object, object]]:
    """Return every unordered pair of fields sharing at least one bit."""
    overlaps = []
    for i, a in enumerate(fields):
        for b in fields[i + 1 :]:
            if a.overlaps(b):
                overlaps.append((a, b))
    return overlaps


class RegisterValidator:
    """
    Register definition validator.

    Hard errors: width outside ``[1, MAX_REGISTER_WIDTH]``, blank names,
    ``msb < lsb``, negative ``lsb``, and field widths that do not match the
    field type. Soft warnings: a field reaching past the register width and
    overlapping fields.
    """

    def __init__(self, register: RegisterDef):
        self.register = register
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []

    @property
    def _location(self) -> str:
        return f"register:{self.register.name or '<unnamed>'}"

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if no errors (warnings are allowed)
        """
        self.errors.clear()
        self.warnings.clear()

        self.validate_register()
        self.validate_fields()
        self.validate_overlaps()

        return len(self.errors) == 0

    def validate_register(self) -> None:
        """Check register-level attributes."""
        reg = self.register
        if reg.width < 1 or reg.width > MAX_REGISTER_WIDTH:
            self.errors.append(
                ValidationError(
                    severity="error",
                    message=f"Register width must be between 1 and {MAX_REGISTER_WIDTH} "
                    f"(got {reg.width})",
                    location=self._location,
                )
            )

        if not reg.name.strip():
            self.errors.append(
                ValidationError(
                    severity="error",
                    message="Register name is required",
                    location=self._location,
                )
            )

    def validate_fields(self) -> None:
        """Check each field's name, bit range and type/width agreement."""
        for field in self.register.fields:
            self._validate_field(field)

    def _field_error(self, field, message: str, suggestion: str = "") -> None:
        self.errors.append(
            ValidationError(
                severity="error",
                message=message,
                location=f"{self._location}:field:{field.name or '<unnamed>'}",
                suggestion=suggestion,
                field_id=field.id,
            )
        )

    def _validate_field(self, field) -> None:
        reg_width = self.register.width

        if not field.name.strip():
            self._field_error(field, "Field name is required")

        if field.msb < field.lsb:
            self._field_error(
                field,
                f"MSB ({field.msb}) must be >= LSB ({field.lsb})",
                suggestion=f"Swap the bounds to [{field.lsb}:{field.msb}]",
            )

        if field.msb >= reg_width:
            self.warnings.append(
                ValidationError(
                    severity="warning",
                    message=f"MSB ({field.msb}) exceeds register width ({reg_width})",
                    location=f"{self._location}:field:{field.name or '<unnamed>'}",
                    suggestion=f"Widen the register to at least {field.msb + 1} bits",
                    field_id=field.id,
                )
            )

        if field.lsb < 0:
            self._field_error(field, "LSB cannot be negative")

        bit_width = field.msb - field.lsb + 1

        if field.type == FieldType.FLAG and bit_width != 1:
            self._field_error(field, f"Flag field must be 1 bit wide (got {bit_width})")

        if field.type == FieldType.FLOAT:
            expected = field.float_type.bit_width
            if bit_width != expected:
                self._field_error(
                    field,
                    f"{field.float_type.value} float requires {expected} bits (got {bit_width})",
                )

        if field.type == FieldType.FIXED_POINT:
            expected = field.q_format.total_bits
            if bit_width != expected:
                self._field_error(
                    field,
                    f"{field.q_format} requires {expected} bits (got {bit_width})",
                )

    def validate_overlaps(self) -> None:
        """Report every pair of overlapping fields as a warning."""
        for a, b in find_field_overlaps(self.register.fields):
            self.warnings.append(
                ValidationError(
                    severity="warning",
                    message=f'Fields "{a.name}" [{a.msb}:{a.lsb}] and '
                    f'"{b.name}" [{b.msb}:{b.lsb}] overlap',
                    location=self._location,
                    field_id=b.id,
                )
            )

    def get_error_summary(self) -> str:
        """Get human-readable error summary."""
        lines = []

        if self.errors:
            lines.append(f"\n{len(self.errors)} Error(s):")
            for err in self.errors:
                lines.append(f"  [{err.severity.upper()}] {err.location}: {err.message}")
                if err.suggestion:
                    lines.append(f"           → {err.suggestion}")

        if self.warnings:
            lines.append(f"\n{len(self.warnings)} Warning(s):")
            for warn in self.warnings:
                lines.append(f"  [{warn.severity.upper()}] {warn.location}: {warn.message}")
                if warn.suggestion:
                    lines.append(f"           → {warn.suggestion}")

        if not self.errors and not self.warnings:
            lines.append("\n✓ All validation checks passed")

        return "\n".join(lines)


def validate_register_def(
    register: RegisterDef,
) -> Tuple[bool, List[ValidationError], List[ValidationError]]:
    """
    Convenience function to validate a register definition.

    Args:
        register: Register definition to validate

    Returns:
        Tuple of (is_valid, errors, warnings)
    """
    validator = RegisterValidator(register)
    is_valid = validator.validate_all()
    return is_valid, validator.errors, validator.warnings


def get_register_overlap_warnings(
    registers: Sequence[RegisterDef], address_unit_bits: int = 8
) -> List[RegisterOverlapWarning]:
    """
    Find registers whose address spans intersect.

    Registers without an offset are ignored. A register occupies
    ``ceil(width / address_unit_bits)`` units starting at its offset. Every
    intersecting unordered pair is reported once, including full
    containment.
    """
    placed = sorted(
        (r for r in registers if r.offset is not None), key=lambda r: r.offset
    )
    spans = [
        (reg, reg.offset, reg.offset + max(1, math.ceil(reg.width / address_unit_bits)) - 1)
        for reg in placed
    ]

    warnings = []
    for i, (a, a_start, a_end) in enumerate(spans):
        for b, b_start, b_end in spans[i + 1 :]:
            # sorted by start, so nothing later can overlap a
            if b_start > a_end:
                break
            warnings.append(
                RegisterOverlapWarning(
                    register_ids=(a.id, b.id),
                    message=f'Registers "{a.name}" ({format_offset(a_start)}-'
                    f'{format_offset(a_end)}) and "{b.name}" '
                    f"({format_offset(b_start)}-{format_offset(b_end)}) overlap",
                )
            )
    return warnings


def validate_field_input(text: str, field_type: FieldType) -> Optional[str]:
    """
    Check user text for a field value before encoding.

    Flag and enum fields take no free text and always pass. Integers accept
    an optional ``-`` and decimal, ``0x``, ``0b`` or ``0o`` digits. Float
    and fixed-point accept finite decimal or scientific notation.

    Returns:
        None if acceptable, otherwise a human-readable message.
    """
    # local import: field_codec depends on this package's register module
    from regcraft.codec.field_codec import parse_float, parse_integer

    field_type = FieldType(field_type)
    if field_type in (FieldType.FLAG, FieldType.ENUM):
        return None

    trimmed = text.strip()
    if not trimmed:
        return "Value required"

    if field_type == FieldType.INTEGER:
        if parse_integer(trimmed) is None:
            return "Invalid integer: use decimal, 0x, 0b, or 0o"
        return None

    number = parse_float(trimmed)
    if number is None or math.isnan(number):
        return "Not a valid number"
    if math.isinf(number):
        return "Infinity is not accepted"
    return None
