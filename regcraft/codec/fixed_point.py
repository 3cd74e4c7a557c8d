"""Signed Qm.n fixed-point encode/decode.

The total width is ``m + n`` bits and the value is always two's complement:
``value = signed_integer / 2**n``. Scaling is done with exact rationals, so
formats wider than a double's exponent range still encode and decode.
"""

import math
from fractions import Fraction

from regcraft.model.register import QFormat
from regcraft.utils import round_half_away

from .bits import to_signed, to_unsigned


def decode_fixed_point(raw_bits: int, q: QFormat) -> float:
    """Decode ``raw_bits`` as a Qm.n value.

    A magnitude beyond the float range decodes as signed infinity.
    """
    total_bits = q.m + q.n
    if total_bits < 1:
        return 0.0
    signed = to_signed(raw_bits, total_bits)
    try:
        return float(Fraction(signed) / Fraction(2) ** q.n)
    except OverflowError:
        return math.inf if signed > 0 else -math.inf


def encode_fixed_point(value: float, q: QFormat) -> int:
    """Encode ``value`` into Qm.n raw bits, rounding half away from zero.

    Out-of-range values are not clamped; the result is truncated to
    ``m + n`` bits the way hardware would. Non-finite input encodes as 0.
    """
    if not math.isfinite(value):
        return 0
    scaled = Fraction(value) * Fraction(2) ** q.n
    return to_unsigned(round_half_away(scaled), q.m + q.n)
