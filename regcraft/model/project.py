"""
Project-level models: a set of register definitions with their current
values and descriptive metadata.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import FlexibleModel
from .register import RegisterDef

ADDRESS_UNIT_BITS_VALUES = (8, 16, 32)
ADDRESS_UNIT_BITS_DEFAULT = 8

MAP_TABLE_WIDTH_VALUES = (8, 16, 32, 64)
MAP_TABLE_WIDTH_DEFAULT = 32


class ProjectMetadata(FlexibleModel):
    """Optional descriptive information about a project.

    Strings are trimmed; blank or non-string values are dropped to None.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    author_email: Optional[str] = None
    link: Optional[str] = None

    @field_validator("title", "description", "date", "author_email", "link", mode="before")
    @classmethod
    def drop_blank(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class Project(FlexibleModel):
    """
    A register project.

    ``values`` maps register id to its current raw value. A register with
    no entry reads as 0.
    """

    registers: List[RegisterDef] = Field(default_factory=list)
    values: Dict[str, int] = Field(default_factory=dict)
    metadata: Optional[ProjectMetadata] = None
    address_unit_bits: int = Field(default=ADDRESS_UNIT_BITS_DEFAULT)

    @field_validator("address_unit_bits")
    @classmethod
    def check_address_unit_bits(cls, v: int) -> int:
        if v not in ADDRESS_UNIT_BITS_VALUES:
            raise ValueError(
                f"address_unit_bits must be one of {ADDRESS_UNIT_BITS_VALUES} (got {v})"
            )
        return v

    def get_register(self, name: str) -> RegisterDef:
        """Find a register by name.

        Raises:
            KeyError: If no register has that name.
        """
        for reg in self.registers:
            if reg.name == name:
                return reg
        raise KeyError(f"Register '{name}' not found")

    def value_of(self, register: RegisterDef) -> int:
        """Current raw value of ``register``, masked to its width."""
        return self.values.get(register.id, 0) & register.mask
