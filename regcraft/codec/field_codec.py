"""
Per-field decode/encode/format.

``decode_field`` extracts a field's bits from a full register value and
interprets them according to the field's type. ``encode_field`` does the
inverse for user input (string, number or bool) and returns the raw field
bits, already masked to the field width. Neither raises on malformed
input; see :func:`parse_integer` and :func:`parse_float` for the fallbacks.
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import ClassVar, Optional, Union

from regcraft.model.register import (
    EnumFieldDef,
    FieldType,
    FixedPointFieldDef,
    FlagFieldDef,
    FloatFieldDef,
    IntegerFieldDef,
    Signedness,
)
from regcraft.utils import round_half_away

from .bits import (
    NEGATIVE_ZERO,
    SignMagnitudeValue,
    extract_bits,
    from_sign_magnitude_bits,
    to_sign_magnitude_bits,
    to_signed,
    to_unsigned,
    width_mask,
)
from .fixed_point import decode_fixed_point, encode_fixed_point
from .float_codec import decode_float, encode_float

logger = logging.getLogger(__name__)

FieldInput = Union[str, int, float, bool]

_INTEGER_RE = re.compile(r"-?(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|[0-9]+)")
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(nan|inf|infinity)", re.IGNORECASE)


# --- Decoded values ---


@dataclass(frozen=True)
class FlagValue:
    value: bool
    type: ClassVar[FieldType] = FieldType.FLAG


@dataclass(frozen=True)
class EnumValue:
    value: int
    name: Optional[str] = None
    type: ClassVar[FieldType] = FieldType.ENUM


@dataclass(frozen=True)
class IntegerValue:
    """Decoded integer; ``value`` may be :data:`NEGATIVE_ZERO`."""

    value: SignMagnitudeValue
    type: ClassVar[FieldType] = FieldType.INTEGER

    @property
    def is_negative_zero(self) -> bool:
        return self.value is NEGATIVE_ZERO


@dataclass(frozen=True)
class FloatValue:
    value: float
    type: ClassVar[FieldType] = FieldType.FLOAT


@dataclass(frozen=True)
class FixedPointValue:
    value: float
    type: ClassVar[FieldType] = FieldType.FIXED_POINT


DecodedValue = Union[FlagValue, EnumValue, IntegerValue, FloatValue, FixedPointValue]


# --- Input parsing ---


def parse_integer(text: str) -> Optional[int]:
    """Parse decimal or ``0x``/``0b``/``0o`` text with an optional ``-``.

    Returns None if ``text`` does not match that grammar, or is a decimal
    longer than the interpreter will convert.
    """
    text = text.strip()
    if not _INTEGER_RE.fullmatch(text):
        return None
    negative = text.startswith("-")
    digits = text.lstrip("-")
    # base 0 rejects leading zeros in plain decimals like "007"
    base = 0 if digits[:2].lower() in ("0x", "0b", "0o") else 10
    try:
        magnitude = int(digits, base)
    except ValueError:
        # longer than sys.get_int_max_str_digits()
        return None
    return -magnitude if negative else magnitude


def parse_float(text: str) -> Optional[float]:
    """Parse decimal/scientific text, or a NaN/Infinity literal.

    Returns None if ``text`` matches neither form.
    """
    text = text.strip()
    if _DECIMAL_RE.fullmatch(text) or _SPECIAL_FLOAT_RE.fullmatch(text):
        return float(text)
    return None


def _to_float(value: Union[int, float]) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _to_int(value: Union[int, float]) -> int:
    """Round a numeric input to an int; non-finite values become 0."""
    if isinstance(value, int):
        return int(value)
    if not math.isfinite(value):
        return 0
    return round_half_away(value)


def _input_to_int(raw: FieldInput) -> int:
    if isinstance(raw, str):
        parsed = parse_integer(raw)
        if parsed is None:
            logger.debug("Unparsable integer input %r, using 0", raw)
            return 0
        return parsed
    return _to_int(raw)


def _input_to_float(raw: FieldInput) -> float:
    if isinstance(raw, str):
        parsed = parse_float(raw)
        if parsed is None:
            logger.debug("Unparsable numeric input %r, using 0.0", raw)
            return 0.0
        return parsed
    return _to_float(raw)


def _is_negative_zero_input(raw: FieldInput) -> bool:
    if raw is NEGATIVE_ZERO:
        return True
    if isinstance(raw, str):
        text = raw.strip()
        return text.startswith("-") and parse_integer(text) == 0
    if isinstance(raw, float):
        return raw == 0 and math.copysign(1.0, raw) < 0
    return False


_FLAG_TRUE = {"true", "set", "on", "yes"}
_FLAG_FALSE = {"false", "clear", "off", "no", ""}


def _input_to_flag(raw: FieldInput) -> int:
    """1 for a set flag, 0 otherwise; NaN counts as clear."""
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _FLAG_TRUE:
            return 1
        if text in _FLAG_FALSE:
            return 0
        return 1 if parse_integer(text) else 0
    if isinstance(raw, float) and math.isnan(raw):
        return 0
    return 1 if raw else 0


# --- Decode ---


def decode_field(register_value: int, field) -> DecodedValue:
    """Decode one field from a full register value."""
    raw_bits = extract_bits(register_value, field.msb, field.lsb)
    bit_width = field.msb - field.lsb + 1

    if isinstance(field, FlagFieldDef):
        return FlagValue(raw_bits != 0)

    if isinstance(field, EnumFieldDef):
        return EnumValue(raw_bits, field.lookup(raw_bits))

    if isinstance(field, IntegerFieldDef):
        if field.signedness == Signedness.TWOS_COMPLEMENT:
            return IntegerValue(to_signed(raw_bits, bit_width))
        if field.signedness == Signedness.SIGN_MAGNITUDE:
            return IntegerValue(from_sign_magnitude_bits(raw_bits, bit_width))
        return IntegerValue(raw_bits)

    if isinstance(field, FloatFieldDef):
        return FloatValue(decode_float(raw_bits, field.float_type))

    if isinstance(field, FixedPointFieldDef):
        return FixedPointValue(decode_fixed_point(raw_bits, field.q_format))

    raise TypeError(f"Unsupported field definition: {type(field).__name__}")


# --- Encode ---


def encode_field(raw: FieldInput, field) -> int:
    """Encode user input into the raw bits for ``field``.

    The result is right-aligned and masked to the field width; place it
    into a register value with :func:`regcraft.codec.bits.replace_bits`.
    """
    bit_width = field.msb - field.lsb + 1
    mask = width_mask(bit_width)

    if isinstance(field, FlagFieldDef):
        return _input_to_flag(raw)

    if isinstance(field, EnumFieldDef):
        return _input_to_int(raw) & mask

    if isinstance(field, IntegerFieldDef):
        if field.signedness == Signedness.SIGN_MAGNITUDE:
            if _is_negative_zero_input(raw):
                return to_sign_magnitude_bits(NEGATIVE_ZERO, bit_width)
            return to_sign_magnitude_bits(_input_to_int(raw), bit_width)
        value = _input_to_int(raw)
        if field.signedness == Signedness.TWOS_COMPLEMENT:
            return to_unsigned(value, bit_width)
        return value & mask

    if isinstance(field, FloatFieldDef):
        return encode_float(_input_to_float(raw), field.float_type) & mask

    if isinstance(field, FixedPointFieldDef):
        return encode_fixed_point(_input_to_float(raw), field.q_format) & mask

    raise TypeError(f"Unsupported field definition: {type(field).__name__}")


# --- Format ---


def _to_precision(value: float, precision: int) -> str:
    """Format with ``precision`` significant digits.

    Uses positional notation for decimal exponents in ``[-6, precision)``
    and ``d.ddddde+N`` otherwise.
    """
    if value == 0:
        value = 0.0
    mantissa, exp_text = f"{value:.{precision - 1}e}".split("e")
    exponent = int(exp_text)
    if -6 <= exponent < precision:
        return f"{value:.{precision - 1 - exponent}f}"
    sign = "+" if exponent >= 0 else "-"
    return f"{mantissa}e{sign}{abs(exponent)}"


def _to_fixed(value: float, digits: int) -> str:
    if value == 0:
        value = 0.0
    quantum = Decimal(1).scaleb(-digits)
    # wide enough for any finite double
    context = Context(prec=400)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=context))


def format_decoded_value(decoded: DecodedValue) -> str:
    """Format a decoded value as display text."""
    if isinstance(decoded, FlagValue):
        return "true" if decoded.value else "false"
    if isinstance(decoded, EnumValue):
        return f"{decoded.name} ({decoded.value})" if decoded.name else str(decoded.value)
    if isinstance(decoded, IntegerValue):
        return str(decoded.value)
    if isinstance(decoded, FloatValue):
        if math.isnan(decoded.value):
            return "NaN"
        if math.isinf(decoded.value):
            return "+Inf" if decoded.value > 0 else "-Inf"
        return _to_precision(decoded.value, 6)
    if isinstance(decoded, FixedPointValue):
        return _to_fixed(decoded.value, 4)
    raise TypeError(f"Unsupported decoded value: {type(decoded).__name__}")
