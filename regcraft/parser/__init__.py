"""Project file parsing and serialization."""

from .errors import ParseError
from .project_parser import (
    ImportResult,
    ProjectParser,
    RegisterImportWarning,
    create_seed_registers,
    dump_project,
    export_project,
    registers_equal,
    sanitize_register,
)

__all__ = [
    "ParseError",
    "ProjectParser",
    "ImportResult",
    "RegisterImportWarning",
    "sanitize_register",
    "export_project",
    "dump_project",
    "registers_equal",
    "create_seed_registers",
]
