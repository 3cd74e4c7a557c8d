import itertools
import pickle

import pytest

from regcraft.codec.bits import (
    NEGATIVE_ZERO,
    clamp_to_width,
    extract_bits,
    from_sign_magnitude_bits,
    get_bit,
    replace_bits,
    to_sign_magnitude_bits,
    to_signed,
    to_unsigned,
    toggle_bit,
    width_mask,
)


class TestExtractReplace:
    @pytest.mark.parametrize(
        "value, msb, lsb, expected",
        [
            (0xABCD, 7, 0, 0xCD),
            (0xABCD, 15, 8, 0xAB),
            (0xABCD, 11, 4, 0xBC),
            (0b100, 2, 2, 1),
            (0xFFFFFFFF, 31, 0, 0xFFFFFFFF),
        ],
    )
    def test_extract_bits(self, value, msb, lsb, expected):
        assert extract_bits(value, msb, lsb) == expected

    def test_extract_beyond_64_bits(self):
        value = (0xA5 << 192) | 1
        assert extract_bits(value, 199, 192) == 0xA5
        assert extract_bits(value, 0, 0) == 1

    def test_replace_bits(self):
        assert replace_bits(0xFFFF, 7, 4, 0x0) == 0xFF0F
        assert replace_bits(0x0000, 15, 8, 0xAB) == 0xAB00

    def test_replace_masks_field_value(self):
        assert replace_bits(0, 3, 0, 0x1F) == 0xF

    def test_replace_beyond_64_bits(self):
        assert replace_bits(0, 130, 128, 0b101) == 0b101 << 128

    def test_replace_below_bit_zero_drops_bits(self):
        # field [1:-2] holding 0b1101: only the top two bits land in the value
        assert replace_bits(0, 1, -2, 0b1101) == 0b11

    @pytest.mark.parametrize(
        "msb, lsb, value, field_value",
        [
            (msb, lsb, value, field_value)
            for (msb, lsb), value, field_value in itertools.product(
                [(0, 0), (7, 0), (15, 8), (31, 4), (63, 0), (64, 1), (99, 37), (255, 128)],
                [0, 0x5A5A5A5A, (1 << 256) - 1, 0xDEADBEEF << 70],
                [0, 1, 0x1234567, (1 << 130) - 3],
            )
        ],
    )
    def test_replace_then_extract(self, msb, lsb, value, field_value):
        width = msb - lsb + 1
        field_mask = width_mask(width) << lsb
        updated = replace_bits(value, msb, lsb, field_value)
        assert extract_bits(updated, msb, lsb) == field_value % (1 << width)
        assert updated & ~field_mask == value & ~field_mask


class TestSingleBit:
    def test_toggle_bit(self):
        assert toggle_bit(0, 3) == 0b1000
        assert toggle_bit(0b1000, 3) == 0

    def test_get_bit(self):
        assert get_bit(0b1000, 3) == 1
        assert get_bit(0b1000, 2) == 0

    def test_width_mask(self):
        assert width_mask(8) == 0xFF
        assert width_mask(0) == 0
        assert width_mask(-1) == 0

    def test_clamp_to_width(self):
        assert clamp_to_width(0x1FF, 8) == 0xFF


class TestTwosComplement:
    @pytest.mark.parametrize(
        "raw, width, expected",
        [
            (0xFF, 8, -1),
            (0x80, 8, -128),
            (0x7F, 8, 127),
            (0x0, 8, 0),
            (0b1, 1, -1),
            (0x1FF, 8, -1),  # masked first
        ],
    )
    def test_to_signed(self, raw, width, expected):
        assert to_signed(raw, width) == expected

    @pytest.mark.parametrize(
        "signed, width, expected",
        [
            (-1, 8, 0xFF),
            (-128, 8, 0x80),
            (127, 8, 0x7F),
            (-129, 8, 0x7F),  # wraps like hardware
            (-1, 100, (1 << 100) - 1),
        ],
    )
    def test_to_unsigned(self, signed, width, expected):
        assert to_unsigned(signed, width) == expected

    def test_zero_width(self):
        assert to_signed(0xFF, 0) == 0


class TestSignMagnitude:
    def test_negative_zero_decodes_to_sentinel(self):
        assert from_sign_magnitude_bits(0x80, 8) is NEGATIVE_ZERO

    @pytest.mark.parametrize(
        "raw, expected",
        [(0xFF, -127), (0x03, 3), (0x83, -3), (0x00, 0)],
    )
    def test_decode(self, raw, expected):
        assert from_sign_magnitude_bits(raw, 8) == expected

    def test_encode_negative_zero(self):
        assert to_sign_magnitude_bits(NEGATIVE_ZERO, 8) == 0x80

    def test_encode_positive_zero(self):
        assert to_sign_magnitude_bits(0, 8) == 0x00

    @pytest.mark.parametrize("value, expected", [(-127, 0xFF), (5, 0x05), (-5, 0x85)])
    def test_encode(self, value, expected):
        assert to_sign_magnitude_bits(value, 8) == expected

    def test_negative_zero_is_not_zero(self):
        assert NEGATIVE_ZERO != 0
        assert str(NEGATIVE_ZERO) == "-0"
        assert repr(NEGATIVE_ZERO) == "NEGATIVE_ZERO"

    def test_negative_zero_survives_pickle(self):
        assert pickle.loads(pickle.dumps(NEGATIVE_ZERO)) is NEGATIVE_ZERO
