import math

import pytest

from regcraft.codec.float_codec import (
    HALF_NAN,
    HALF_NEG_INF,
    HALF_POS_INF,
    bits_to_float16,
    bits_to_float32,
    bits_to_float64,
    decode_float,
    encode_float,
    float16_to_bits,
    float32_to_bits,
    float64_to_bits,
)
from regcraft.model.register import FloatType


class TestSinglePrecision:
    def test_encode(self):
        assert float32_to_bits(1.5) == 0x3FC00000
        assert float32_to_bits(0.1) == 0x3DCCCCCD
        assert float32_to_bits(-2.0) == 0xC0000000

    def test_decode(self):
        assert bits_to_float32(0x3FC00000) == 1.5
        assert math.isnan(bits_to_float32(0x7FC00000))

    def test_overflow_rounds_to_infinity(self):
        assert float32_to_bits(1e39) == 0x7F800000
        assert float32_to_bits(-1e39) == 0xFF800000

    def test_negative_zero_keeps_sign(self):
        assert float32_to_bits(-0.0) == 0x80000000


class TestDoublePrecision:
    def test_infinity(self):
        assert float64_to_bits(math.inf) == 0x7FF0000000000000

    def test_roundtrip(self):
        assert bits_to_float64(float64_to_bits(1.5)) == 1.5
        assert float64_to_bits(1.5) == 0x3FF8000000000000


class TestHalfPrecision:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1.0, 0x3C00),
            (-2.0, 0xC000),
            (0.5, 0x3800),
            (65504.0, 0x7BFF),
            (2.0**-24, 0x0001),  # smallest subnormal
            (2.0**-14, 0x0400),  # smallest normal
        ],
    )
    def test_encode(self, value, expected):
        assert float16_to_bits(value) == expected

    def test_nan(self):
        assert float16_to_bits(math.nan) == HALF_NAN == 0x7E00

    def test_infinities(self):
        assert float16_to_bits(math.inf) == HALF_POS_INF
        assert float16_to_bits(-math.inf) == HALF_NEG_INF

    @pytest.mark.parametrize("value, expected", [(65520.0, 0x7C00), (-65520.0, 0xFC00)])
    def test_saturates_to_infinity(self, value, expected):
        assert float16_to_bits(value) == expected

    def test_large_exponent_saturates(self):
        assert float16_to_bits(1e6) == 0x7C00

    def test_negative_zero_encodes_as_positive_zero(self):
        assert float16_to_bits(-0.0) == 0x0000
        assert float16_to_bits(0.0) == 0x0000

    def test_mantissa_carry_increments_exponent(self):
        assert float16_to_bits(2047.5) == 0x6800
        assert bits_to_float16(0x6800) == 2048.0

    def test_subnormal_carry_into_smallest_normal(self):
        just_below = 2047 * 2.0**-25  # mantissa rounds from 1023.5 up to 1024
        assert float16_to_bits(just_below) == 0x0400

    def test_rounds_half_away_from_zero(self):
        # 1 + 1.5 ulp: the mantissa lands exactly on 1.5
        assert float16_to_bits(1 + 1.5 / 1024) == 0x3C02
        assert float16_to_bits(-(1 + 1.5 / 1024)) == 0xBC02

    @pytest.mark.parametrize(
        "bits, expected",
        [
            (0x3C00, 1.0),
            (0x7BFF, 65504.0),
            (0x0001, 2.0**-24),
            (0x8000, -0.0),
            (0x7C00, math.inf),
            (0xFC00, -math.inf),
        ],
    )
    def test_decode(self, bits, expected):
        assert bits_to_float16(bits) == expected

    def test_decode_nan(self):
        assert math.isnan(bits_to_float16(0x7E00))


class TestDispatch:
    def test_decode_by_precision(self):
        assert decode_float(0x3C00, FloatType.HALF) == 1.0
        assert decode_float(0x3FC00000, FloatType.SINGLE) == 1.5
        assert decode_float(0x3FF8000000000000, "double") == 1.5

    def test_encode_by_precision(self):
        assert encode_float(1.0, FloatType.HALF) == 0x3C00
        assert encode_float(1.5) == 0x3FC00000
        assert encode_float(1.5, "double") == 0x3FF8000000000000


class TestExactRoundTrip:
    @pytest.mark.parametrize("float_type", [FloatType.SINGLE, FloatType.DOUBLE])
    @pytest.mark.parametrize(
        "value", [-42.0, 0.0, 1.0, -0.5, 3.25, 1024.0, 2.0**-20, -65504.0, 2.0**100]
    )
    def test_representable_values_survive(self, float_type, value):
        assert decode_float(encode_float(value, float_type), float_type) == value

    @pytest.mark.parametrize("value", [-42.0, 0.5, 1.0, 65504.0, 2.0**-24])
    def test_half_representable_values_survive(self, value):
        assert decode_float(encode_float(value, FloatType.HALF), FloatType.HALF) == value

    def test_negative_42_bit_patterns(self):
        assert encode_float(-42.0, FloatType.SINGLE) == 0xC2280000
        assert encode_float(-42.0, FloatType.DOUBLE) == 0xC045000000000000
