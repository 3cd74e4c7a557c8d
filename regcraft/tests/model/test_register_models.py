"""
Tests for the Pydantic register/field models.
"""

import pytest
from pydantic import ValidationError

from regcraft.model import (
    EnumFieldDef,
    FixedPointFieldDef,
    FlagFieldDef,
    FloatFieldDef,
    FloatType,
    IntegerFieldDef,
    Project,
    ProjectMetadata,
    QFormat,
    RegisterDef,
    Signedness,
)


class TestFieldUnion:
    def test_discriminates_on_type(self):
        reg = RegisterDef.model_validate(
            {
                "name": "R",
                "width": 32,
                "fields": [
                    {"name": "A", "msb": 0, "lsb": 0, "type": "flag"},
                    {"name": "B", "msb": 3, "lsb": 1, "type": "enum"},
                    {"name": "C", "msb": 7, "lsb": 4, "type": "integer"},
                    {"name": "D", "msb": 31, "lsb": 16, "type": "float", "floatType": "half"},
                    {"name": "E", "msb": 15, "lsb": 8, "type": "fixed-point",
                     "qFormat": {"m": 4, "n": 4}},
                ],
            }
        )
        kinds = [type(f) for f in reg.fields]
        assert kinds == [
            FlagFieldDef,
            EnumFieldDef,
            IntegerFieldDef,
            FloatFieldDef,
            FixedPointFieldDef,
        ]
        assert reg.fields[3].float_type == FloatType.HALF
        assert str(reg.fields[4].q_format) == "Q4.4"

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            RegisterDef.model_validate(
                {"name": "R", "fields": [{"name": "A", "msb": 0, "lsb": 0, "type": "bogus"}]}
            )

    def test_bits_shorthand(self):
        field = IntegerFieldDef.model_validate({"name": "X", "bits": "[7:4]"})
        assert (field.msb, field.lsb) == (7, 4)
        assert field.bit_width == 4
        assert field.bit_range == "[7:4]"

    def test_legacy_signed_maps_to_signedness(self):
        assert (
            IntegerFieldDef.model_validate({"name": "X", "signed": True}).signedness
            == Signedness.TWOS_COMPLEMENT
        )
        assert (
            IntegerFieldDef.model_validate({"name": "X", "signed": False}).signedness
            == Signedness.UNSIGNED
        )

    def test_explicit_signedness_wins_over_legacy_flag(self):
        field = IntegerFieldDef.model_validate(
            {"name": "X", "signed": True, "signedness": "sign-magnitude"}
        )
        assert field.signedness == Signedness.SIGN_MAGNITUDE

    def test_out_of_range_bits_still_load(self):
        field = IntegerFieldDef(name="X", msb=2, lsb=5)
        assert field.bit_width == -2

    def test_overlaps(self):
        a = IntegerFieldDef(name="A", msb=7, lsb=4)
        b = IntegerFieldDef(name="B", msb=5, lsb=2)
        c = IntegerFieldDef(name="C", msb=1, lsb=0)
        assert a.overlaps(b)
        assert not a.overlaps(c)

    def test_enum_lookup_returns_first_match(self):
        field = EnumFieldDef(
            name="E",
            msb=1,
            lsb=0,
            enum_entries=[{"value": 1, "name": "ONE"}, {"value": 1, "name": "UNO"}],
        )
        assert field.lookup(1) == "ONE"
        assert field.lookup(2) is None

    def test_qformat_forbids_unknown_keys(self):
        with pytest.raises(ValidationError):
            QFormat(m=4, n=4, x=1)

    def test_float_type_widths(self):
        assert [t.bit_width for t in FloatType] == [16, 32, 64]


class TestRegisterDef:
    def test_defaults(self):
        reg = RegisterDef(name="R")
        assert reg.width == 32
        assert reg.offset is None
        assert reg.fields == []
        assert reg.id

    def test_ids_are_unique(self):
        assert RegisterDef(name="A").id != RegisterDef(name="B").id

    def test_mask_and_unit_size(self):
        reg = RegisterDef(name="R", width=12)
        assert reg.mask == 0xFFF
        assert reg.unit_size(8) == 2
        assert reg.unit_size(16) == 1

    def test_hex_offset(self):
        assert RegisterDef(name="R", offset=4).hex_offset == "0x04"
        assert RegisterDef(name="R").hex_offset is None

    def test_get_field(self, make_register):
        reg = make_register(fields=[("A", 3, 0), ("B", 7, 4)])
        assert reg.get_field("B").lsb == 4
        with pytest.raises(KeyError):
            reg.get_field("missing")

    def test_camel_case_dump(self):
        reg = RegisterDef(
            name="R",
            fields=[FloatFieldDef(name="F", msb=31, lsb=0, float_type="double")],
        )
        data = reg.model_dump(by_alias=True)
        assert data["fields"][0]["floatType"] == "double"


class TestProject:
    def test_metadata_drops_blank_values(self):
        meta = ProjectMetadata.model_validate(
            {"title": "  Demo  ", "description": "   ", "authorEmail": "a@b.c", "link": 5}
        )
        assert meta.title == "Demo"
        assert meta.description is None
        assert meta.author_email == "a@b.c"
        assert meta.link is None
        assert not meta.is_empty
        assert ProjectMetadata().is_empty

    def test_address_unit_bits_validated(self):
        assert Project(address_unit_bits=16).address_unit_bits == 16
        with pytest.raises(ValidationError):
            Project(address_unit_bits=12)

    def test_value_of_masks_to_width(self):
        reg = RegisterDef(name="R", width=8)
        project = Project(registers=[reg], values={reg.id: 0x1FF})
        assert project.value_of(reg) == 0xFF
        assert project.value_of(RegisterDef(name="other")) == 0

    def test_get_register(self):
        project = Project(registers=[RegisterDef(name="CTRL")])
        assert project.get_register("CTRL").name == "CTRL"
        with pytest.raises(KeyError):
            project.get_register("STATUS")
