"""
Bit-level codecs: raw register values to and from typed field values.
"""

from .bits import (
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
from .field_codec import (
    DecodedValue,
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
from .fixed_point import decode_fixed_point, encode_fixed_point
from .float_codec import (
    bits_to_float16,
    bits_to_float32,
    bits_to_float64,
    decode_float,
    encode_float,
    float16_to_bits,
    float32_to_bits,
    float64_to_bits,
)

__all__ = [
    "NEGATIVE_ZERO",
    "width_mask",
    "extract_bits",
    "replace_bits",
    "toggle_bit",
    "get_bit",
    "clamp_to_width",
    "to_signed",
    "to_unsigned",
    "from_sign_magnitude_bits",
    "to_sign_magnitude_bits",
    "bits_to_float16",
    "float16_to_bits",
    "bits_to_float32",
    "float32_to_bits",
    "bits_to_float64",
    "float64_to_bits",
    "decode_float",
    "encode_float",
    "decode_fixed_point",
    "encode_fixed_point",
    "FlagValue",
    "EnumValue",
    "IntegerValue",
    "FloatValue",
    "FixedPointValue",
    "DecodedValue",
    "decode_field",
    "encode_field",
    "format_decoded_value",
    "parse_integer",
    "parse_float",
]
