"""
Pydantic models for register definitions and projects.

For a live value bound to a definition, use regcraft.runtime.
"""

from .base import FlexibleModel, RegcraftBaseModel, StrictModel, new_id
from .project import (
    ADDRESS_UNIT_BITS_DEFAULT,
    ADDRESS_UNIT_BITS_VALUES,
    MAP_TABLE_WIDTH_DEFAULT,
    MAP_TABLE_WIDTH_VALUES,
    Project,
    ProjectMetadata,
)
from .register import (
    MAX_REGISTER_WIDTH,
    EnumEntry,
    EnumFieldDef,
    FieldDef,
    FieldType,
    FixedPointFieldDef,
    FlagFieldDef,
    FlagLabels,
    FloatFieldDef,
    FloatType,
    IntegerFieldDef,
    QFormat,
    RegisterDef,
    Signedness,
)

__all__ = [
    # Base
    "RegcraftBaseModel",
    "StrictModel",
    "FlexibleModel",
    "new_id",
    # Register
    "MAX_REGISTER_WIDTH",
    "FieldType",
    "Signedness",
    "FloatType",
    "EnumEntry",
    "QFormat",
    "FlagLabels",
    "FlagFieldDef",
    "EnumFieldDef",
    "IntegerFieldDef",
    "FloatFieldDef",
    "FixedPointFieldDef",
    "FieldDef",
    "RegisterDef",
    # Project
    "ADDRESS_UNIT_BITS_VALUES",
    "ADDRESS_UNIT_BITS_DEFAULT",
    "MAP_TABLE_WIDTH_VALUES",
    "MAP_TABLE_WIDTH_DEFAULT",
    "ProjectMetadata",
    "Project",
]
