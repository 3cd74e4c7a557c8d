"""
Bit-level primitives on arbitrary-width unsigned integers.

Register widths may exceed 64 bits, so everything here works on plain
Python ``int`` values; callers never see fixed-word wraparound.
Bit ranges are inclusive and 0-indexed with ``msb >= lsb >= 0``.
"""

from typing import Union


class _NegativeZero:
    """Sentinel for the sign-magnitude ``-0`` encoding.

    Distinct from integer ``0``; its text form is ``"-0"``.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NEGATIVE_ZERO"

    def __str__(self) -> str:
        return "-0"

    def __reduce__(self):
        return (_NegativeZero, ())


NEGATIVE_ZERO = _NegativeZero()

SignMagnitudeValue = Union[int, _NegativeZero]


def width_mask(width: int) -> int:
    """All-ones mask of ``width`` bits (0 for non-positive widths)."""
    if width <= 0:
        return 0
    return (1 << width) - 1


def extract_bits(value: int, msb: int, lsb: int) -> int:
    """Extract bits ``[msb:lsb]`` from ``value``, right-aligned.

    Bit positions below 0 read as zero.
    """
    shifted = value >> lsb if lsb >= 0 else value << -lsb
    return shifted & width_mask(msb - lsb + 1)


def replace_bits(value: int, msb: int, lsb: int, field_value: int) -> int:
    """Replace bits ``[msb:lsb]`` in ``value`` with ``field_value``.

    ``field_value`` is masked to the field width before insertion.
    Bit positions below 0 are dropped.
    """
    mask = width_mask(msb - lsb + 1)
    field_value &= mask
    if lsb < 0:
        if msb < 0:
            return value
        return replace_bits(value, msb, 0, field_value >> -lsb)
    cleared = value & ~(mask << lsb)
    return cleared | (field_value << lsb)


def toggle_bit(value: int, bit: int) -> int:
    """Flip a single bit."""
    return value ^ (1 << bit)


def get_bit(value: int, bit: int) -> int:
    """Return a single bit as 0 or 1."""
    return (value >> bit) & 1


def clamp_to_width(value: int, width: int) -> int:
    """Truncate ``value`` to its low ``width`` bits."""
    return value & width_mask(width)


def to_signed(raw: int, width: int) -> int:
    """Interpret ``raw`` as a two's complement integer of ``width`` bits."""
    if width < 1:
        return 0
    raw &= width_mask(width)
    if raw >> (width - 1):
        return raw - (1 << width)
    return raw


def to_unsigned(signed: int, width: int) -> int:
    """Two's complement encode ``signed`` into ``width`` bits.

    Negative values become ``2**width + signed``; the result is always
    masked to ``width`` bits, so out-of-range inputs wrap like hardware.
    """
    return signed & width_mask(width)


def from_sign_magnitude_bits(raw: int, width: int) -> SignMagnitudeValue:
    """Decode sign-magnitude bits: MSB is the sign, the rest the magnitude.

    Returns :data:`NEGATIVE_ZERO` when the sign bit is set and the
    magnitude is zero.
    """
    if width < 1:
        return 0
    sign_bit = 1 << (width - 1)
    magnitude = raw & (sign_bit - 1)
    if raw & sign_bit:
        return NEGATIVE_ZERO if magnitude == 0 else -magnitude
    return magnitude


def to_sign_magnitude_bits(value: SignMagnitudeValue, width: int) -> int:
    """Encode ``value`` as sign-magnitude bits of ``width`` bits.

    :data:`NEGATIVE_ZERO` encodes as sign=1, magnitude=0. Magnitudes too
    large for ``width - 1`` bits are truncated.
    """
    if width < 1:
        return 0
    sign_bit = 1 << (width - 1)
    magnitude_mask = sign_bit - 1
    if value is NEGATIVE_ZERO:
        return sign_bit
    if value < 0:
        return sign_bit | (-value & magnitude_mask)
    return value & magnitude_mask
