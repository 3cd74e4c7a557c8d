"""
Base models for register definitions.

Provides shared base models with centralized configuration for all
regcraft schema classes, so individual models do not repeat their
``model_config`` declarations.

Two ``extra`` policies exist:
    StrictModel (extra="forbid") is for small value objects such as
    QFormat and EnumEntry where an unknown key is almost always a typo.
    FlexibleModel (extra="ignore") is for register and field definitions,
    which are imported from files written by other tools and may carry
    keys regcraft does not know about.
"""

import uuid

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


class RegcraftBaseModel(BaseModel):
    """Base model with shared configuration for all regcraft schema models.

    Provides camelCase aliasing, assignment validation, and allows field
    population by either alias or Python name.
    """

    model_config = {
        "validate_assignment": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class StrictModel(RegcraftBaseModel):
    """Base model that forbids unknown fields."""

    model_config = {
        **RegcraftBaseModel.model_config,
        "extra": "forbid",
    }


class FlexibleModel(RegcraftBaseModel):
    """Base model that silently ignores unknown fields."""

    model_config = {
        **RegcraftBaseModel.model_config,
        "extra": "ignore",
    }
