import os
import sys

import pytest

# Add the project root to sys.path so that regcraft is importable
# This is needed because of the flat layout structure
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from regcraft.model.register import IntegerFieldDef, RegisterDef  # noqa: E402


@pytest.fixture
def make_field():
    """Build a plain unsigned integer field spanning ``[msb:lsb]``."""

    def _make(name, msb, lsb):
        return IntegerFieldDef(id=name, name=name, msb=msb, lsb=lsb)

    return _make


@pytest.fixture
def make_register(make_field):
    """Build a register from ``(name, msb, lsb)`` field tuples."""

    def _make(name="REG", width=32, offset=None, fields=()):
        return RegisterDef(
            id=name,
            name=name,
            width=width,
            offset=offset,
            fields=[make_field(*f) for f in fields],
        )

    return _make
