"""
Tests for per-field decode/encode/format.
"""

import logging
import math
import sys

import pytest

from regcraft.codec.bits import NEGATIVE_ZERO, replace_bits
from regcraft.codec.field_codec import (
    EnumValue,
    FixedPointValue,
    FlagValue,
    FloatValue,
    IntegerValue,
    decode_field,
    encode_field,
    format_decoded_value,
    parse_float,
    parse_integer,
)
from regcraft.model.register import (
    EnumFieldDef,
    FixedPointFieldDef,
    FlagFieldDef,
    FloatFieldDef,
    IntegerFieldDef,
)

MODE = EnumFieldDef(
    name="MODE",
    msb=4,
    lsb=2,
    enum_entries=[
        {"value": 0, "name": "IDLE"},
        {"value": 1, "name": "RUN"},
        {"value": 2, "name": "SLEEP"},
    ],
)

# 0 when the interpreter has no limit on int(str) length
INT_STR_DIGIT_LIMIT = getattr(sys, "get_int_max_str_digits", lambda: 0)()


def integer_field(signedness, msb=7, lsb=0):
    return IntegerFieldDef(name="VAL", msb=msb, lsb=lsb, signedness=signedness)


class TestParsing:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("42", 42),
            (" 42 ", 42),
            ("-7", -7),
            ("0x1F", 31),
            ("0XfF", 255),
            ("-0x10", -16),
            ("0b101", 5),
            ("0o17", 15),
            ("007", 7),
        ],
    )
    def test_parse_integer(self, text, expected):
        assert parse_integer(text) == expected

    @pytest.mark.parametrize("text", ["", "1.5", "0x", "abc", "--1", "+5", "0b102"])
    def test_parse_integer_rejects(self, text):
        assert parse_integer(text) is None

    @pytest.mark.skipif(INT_STR_DIGIT_LIMIT == 0, reason="no integer string limit")
    def test_parse_integer_beyond_digit_limit(self):
        text = "1" * (INT_STR_DIGIT_LIMIT + 1)
        assert parse_integer(text) is None

    def test_parse_long_hex(self):
        assert parse_integer("0x" + "f" * 5000) == (1 << 20000) - 1

    @pytest.mark.parametrize(
        "text, expected",
        [("1.5", 1.5), ("-2", -2.0), (".5", 0.5), ("1e3", 1000.0), ("+3.", 3.0)],
    )
    def test_parse_float(self, text, expected):
        assert parse_float(text) == expected

    def test_parse_float_specials(self):
        assert math.isnan(parse_float("NaN"))
        assert parse_float("Infinity") == math.inf
        assert parse_float("-inf") == -math.inf

    @pytest.mark.parametrize("text", ["", "abc", "1.5.2", "3.14abc", "0x10"])
    def test_parse_float_rejects(self, text):
        assert parse_float(text) is None


class TestDecode:
    def test_flag_is_true_for_any_set_bit(self):
        wide_flag = FlagFieldDef(name="F", msb=3, lsb=0)
        assert decode_field(0b0100, wide_flag) == FlagValue(True)
        assert decode_field(0b10000, wide_flag) == FlagValue(False)

    def test_enum_resolves_name(self):
        assert decode_field(2 << 2, MODE) == EnumValue(2, "SLEEP")

    def test_enum_unknown_value_has_no_name(self):
        assert decode_field(7 << 2, MODE) == EnumValue(7, None)

    def test_unsigned(self):
        assert decode_field(0xAB00, integer_field("unsigned", 15, 8)) == IntegerValue(0xAB)

    def test_twos_complement(self):
        assert decode_field(0xFF, integer_field("twos-complement")) == IntegerValue(-1)

    def test_sign_magnitude(self):
        field = integer_field("sign-magnitude")
        assert decode_field(0xFF, field) == IntegerValue(-127)
        assert decode_field(0x03, field) == IntegerValue(3)
        assert decode_field(0x80, field).is_negative_zero

    def test_float(self):
        half = FloatFieldDef(name="H", msb=31, lsb=16, float_type="half")
        assert decode_field(0x3C00 << 16, half) == FloatValue(1.0)

    def test_fixed_point(self):
        gain = FixedPointFieldDef(name="GAIN", msb=31, lsb=24, q_format={"m": 4, "n": 4})
        assert decode_field(24 << 24, gain) == FixedPointValue(1.5)

    def test_legacy_signed_flag(self):
        field = IntegerFieldDef.model_validate({"name": "T", "msb": 7, "lsb": 0, "signed": True})
        assert decode_field(0x80, field) == IntegerValue(-128)


class TestEncode:
    @pytest.mark.parametrize(
        "raw, expected",
        [(True, 1), (False, 0), (1, 1), (0, 0), ("true", 1), ("0", 0), ("false", 0), ("1", 1)],
    )
    def test_flag(self, raw, expected):
        assert encode_field(raw, FlagFieldDef(name="F", msb=0, lsb=0)) == expected

    def test_flag_nan_is_clear(self):
        assert encode_field(math.nan, FlagFieldDef(name="F", msb=0, lsb=0)) == 0

    def test_enum_masks_to_width(self):
        assert encode_field("2", MODE) == 2
        assert encode_field(9, MODE) == 1

    def test_unsigned_masks(self):
        assert encode_field("0x1FF", integer_field("unsigned")) == 0xFF

    def test_twos_complement(self):
        field = integer_field("twos-complement")
        assert encode_field("-1", field) == 0xFF
        assert encode_field(-128, field) == 0x80
        assert encode_field("0x7f", field) == 0x7F

    def test_numeric_input_rounds_half_away(self):
        field = integer_field("twos-complement")
        assert encode_field(2.5, field) == 3
        assert encode_field(-2.5, field) == 0xFD

    @pytest.mark.parametrize("raw", ["-0", " -0x0 ", -0.0, NEGATIVE_ZERO])
    def test_sign_magnitude_negative_zero(self, raw):
        assert encode_field(raw, integer_field("sign-magnitude")) == 0x80

    def test_sign_magnitude_values(self):
        field = integer_field("sign-magnitude")
        assert encode_field("0", field) == 0x00
        assert encode_field(0, field) == 0x00
        assert encode_field("-5", field) == 0x85

    def test_float(self):
        single = FloatFieldDef(name="S", msb=31, lsb=0)
        assert encode_field("1.5", single) == 0x3FC00000
        assert encode_field("Infinity", single) == 0x7F800000

    def test_half_nan_literal(self):
        half = FloatFieldDef(name="H", msb=15, lsb=0, float_type="half")
        assert encode_field("NaN", half) == 0x7E00

    def test_huge_int_to_float_does_not_raise(self):
        double = FloatFieldDef(name="D", msb=63, lsb=0, float_type="double")
        assert encode_field(10**400, double) == 0x7FF0000000000000

    def test_fixed_point(self):
        gain = FixedPointFieldDef(name="GAIN", msb=7, lsb=0, q_format={"m": 4, "n": 4})
        assert encode_field("1.5", gain) == 24
        assert encode_field(-1.0, gain) == 240

    def test_unparsable_integer_falls_back_to_zero(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="regcraft.codec.field_codec"):
            assert encode_field("xyz", integer_field("unsigned")) == 0
        assert "Unparsable integer input" in caplog.text

    def test_very_long_decimal_does_not_raise(self):
        # 5000 ones mod 256 is 11111111 mod 256
        expected = 0 if 0 < INT_STR_DIGIT_LIMIT < 5000 else 0xC7
        assert encode_field("1" * 5000, integer_field("unsigned")) == expected

    def test_wide_fixed_point(self):
        wide = FixedPointFieldDef(name="Q", msb=1999, lsb=0, q_format={"m": 976, "n": 1024})
        assert encode_field("1.0", wide) == 1 << 1024
        assert decode_field(1 << 1024, wide) == FixedPointValue(1.0)

    def test_unparsable_float_falls_back_to_zero(self):
        single = FloatFieldDef(name="S", msb=31, lsb=0)
        assert encode_field("abc", single) == 0

    def test_roundtrip_through_register(self):
        gain = FixedPointFieldDef(name="GAIN", msb=31, lsb=24, q_format={"m": 4, "n": 4})
        value = replace_bits(0x00FFFFFF, 31, 24, encode_field("-2.25", gain))
        assert decode_field(value, gain) == FixedPointValue(-2.25)
        assert value & 0x00FFFFFF == 0x00FFFFFF


class TestFormat:
    @pytest.mark.parametrize(
        "decoded, expected",
        [
            (FlagValue(True), "true"),
            (FlagValue(False), "false"),
            (EnumValue(2, "SLEEP"), "SLEEP (2)"),
            (EnumValue(7), "7"),
            (IntegerValue(-127), "-127"),
            (IntegerValue(NEGATIVE_ZERO), "-0"),
            (IntegerValue(2**100), str(2**100)),
            (FloatValue(math.nan), "NaN"),
            (FloatValue(math.inf), "+Inf"),
            (FloatValue(-math.inf), "-Inf"),
            (FloatValue(1.5), "1.50000"),
            (FloatValue(0.1), "0.100000"),
            (FloatValue(123456.0), "123456"),
            (FloatValue(1234567.0), "1.23457e+6"),
            (FloatValue(1e-7), "1.00000e-7"),
            (FloatValue(-0.0), "0.00000"),
            (FixedPointValue(1.5), "1.5000"),
            (FixedPointValue(-1.0), "-1.0000"),
            (FixedPointValue(0.03125), "0.0313"),
            (FixedPointValue(-0.0), "0.0000"),
        ],
    )
    def test_format(self, decoded, expected):
        assert format_decoded_value(decoded) == expected
