"""
IEEE-754 float encode/decode.

Single and double precision are bit-cast through ``struct``, which uses the
platform's native binary32/binary64 conversion and therefore gets subnormals,
NaN payloads and round-to-nearest right for free.

Half precision (binary16) is built by hand: 1 sign, 5 exponent and 10
mantissa bits, exponent bias 15.
"""

import math
import struct

from regcraft.model.register import FloatType
from regcraft.utils import round_half_away

HALF_NAN = 0x7E00
HALF_POS_INF = 0x7C00
HALF_NEG_INF = 0xFC00
FLOAT32_POS_INF = 0x7F800000
FLOAT32_NEG_INF = 0xFF800000


# --- Single precision (32-bit) ---


def bits_to_float32(bits: int) -> float:
    return struct.unpack(">f", (bits & 0xFFFFFFFF).to_bytes(4, "big"))[0]


def float32_to_bits(value: float) -> int:
    """Round ``value`` to the nearest binary32 and return its bit pattern.

    Finite values beyond the binary32 range round to signed infinity.
    """
    try:
        packed = struct.pack(">f", value)
    except OverflowError:
        return FLOAT32_NEG_INF if value < 0 else FLOAT32_POS_INF
    return int.from_bytes(packed, "big")


# --- Double precision (64-bit) ---


def bits_to_float64(bits: int) -> float:
    return struct.unpack(">d", (bits & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "big"))[0]


def float64_to_bits(value: float) -> int:
    return int.from_bytes(struct.pack(">d", value), "big")


# --- Half precision (16-bit) ---


def bits_to_float16(bits: int) -> float:
    """Decode a binary16 bit pattern."""
    h = bits & 0xFFFF
    sign = (h >> 15) & 1
    exponent = (h >> 10) & 0x1F
    mantissa = h & 0x3FF

    if exponent == 0:
        # Subnormal or zero
        value = (mantissa / 1024) * 2.0**-14
    elif exponent == 0x1F:
        value = math.inf if mantissa == 0 else math.nan
    else:
        value = (1 + mantissa / 1024) * 2.0 ** (exponent - 15)

    return -value if sign else value


def float16_to_bits(value: float) -> int:
    """Encode ``value`` as binary16, rounding half away from zero.

    The sign is taken from ``value < 0``, so ``-0.0`` encodes as ``0x0000``
    exactly like ``+0.0``.
    """
    if math.isnan(value):
        return HALF_NAN
    if math.isinf(value):
        return HALF_POS_INF if value > 0 else HALF_NEG_INF

    sign = 1 if value < 0 else 0
    value = abs(value)

    if value == 0:
        return 0x0000

    # frexp gives value = frac * 2**e with frac in [0.5, 1); floor(log2) is e - 1
    exponent = math.frexp(value)[1] - 1

    if exponent < -14:
        # Subnormal; a mantissa that rounds up to 1024 carries into the
        # smallest normal exponent through the addition below
        mantissa = round_half_away(value * 2.0**14 * 1024)
        biased = 0
    elif exponent > 15:
        return HALF_NEG_INF if sign else HALF_POS_INF
    else:
        mantissa = round_half_away((value / 2.0**exponent - 1) * 1024)
        biased = exponent + 15
        if mantissa > 1023:
            mantissa = 0
            biased += 1
            if biased > 30:
                return HALF_NEG_INF if sign else HALF_POS_INF

    return (sign << 15) | ((biased << 10) + mantissa)


# --- Dispatch ---

_DECODERS = {
    FloatType.HALF: bits_to_float16,
    FloatType.SINGLE: bits_to_float32,
    FloatType.DOUBLE: bits_to_float64,
}

_ENCODERS = {
    FloatType.HALF: float16_to_bits,
    FloatType.SINGLE: float32_to_bits,
    FloatType.DOUBLE: float64_to_bits,
}


def decode_float(bits: int, float_type: FloatType = FloatType.SINGLE) -> float:
    """Decode ``bits`` in the given precision."""
    return _DECODERS[FloatType(float_type)](bits)


def encode_float(value: float, float_type: FloatType = FloatType.SINGLE) -> int:
    """Encode ``value`` in the given precision."""
    return _ENCODERS[FloatType(float_type)](value)
