"""
Project file import/export.

Project files are JSON or YAML documents of the form::

    version: 1
    registers:
      - name: CTRL
        width: 32
        offset: 0
        fields:
          - {name: EN, msb: 0, lsb: 0, type: flag}
    registerValues:
      CTRL: "0x1"
    project: {title: Demo}
    addressUnitBits: 8

Files are usually written by other tools, so import is lenient: each
register is sanitized (unknown or malformed attributes fall back to
defaults), validated, and skipped with a :class:`RegisterImportWarning` if
it has hard validation errors. Only structural problems with the file as a
whole raise :class:`ParseError`.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from regcraft.codec.field_codec import parse_integer
from regcraft.model.base import new_id
from regcraft.model.project import (
    ADDRESS_UNIT_BITS_DEFAULT,
    ADDRESS_UNIT_BITS_VALUES,
    Project,
    ProjectMetadata,
)
from regcraft.model.register import FieldType, FloatType, RegisterDef, Signedness
from regcraft.model.validators import ValidationError, validate_register_def
from regcraft.runtime.register_value import format_hex_value
from regcraft.utils import filter_none, parse_bit_range

from .errors import ParseError, format_key_path

logger = logging.getLogger(__name__)

PROJECT_FILE_VERSION = 1

_FIELD_TYPES = {t.value for t in FieldType}
_FLOAT_TYPES = {t.value for t in FloatType}
_SIGNEDNESS = {s.value for s in Signedness}


@dataclass
class RegisterImportWarning:
    """A register skipped on import because it failed validation."""

    register_index: int
    register_name: str
    errors: List[ValidationError] = field(default_factory=list)


@dataclass
class ImportResult:
    project: Project
    warnings: List[RegisterImportWarning] = field(default_factory=list)


def _get(raw: Dict[str, Any], key: str) -> Any:
    """Look up a camelCase key, falling back to its snake_case spelling."""
    if key in raw:
        return raw[key]
    return raw.get(to_snake(key))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _sanitize_field(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only known field attributes, defaulting anything malformed."""
    field_type = raw.get("type")
    if not isinstance(field_type, str) or field_type not in _FIELD_TYPES:
        field_type = FieldType.INTEGER.value

    msb, lsb = raw.get("msb"), raw.get("lsb")
    if msb is None and lsb is None and raw.get("bits") is not None:
        try:
            msb, lsb = parse_bit_range(str(raw["bits"]))
        except ValueError:
            logger.debug("Ignoring malformed bit range %r", raw["bits"])

    field_id = raw.get("id")
    name = raw.get("name")
    description = raw.get("description")
    result: Dict[str, Any] = {
        "id": field_id if isinstance(field_id, str) and field_id else new_id(),
        "name": name if isinstance(name, str) else "",
        "msb": msb if _is_int(msb) else 0,
        "lsb": lsb if _is_int(lsb) else 0,
        "type": field_type,
    }
    if isinstance(description, str):
        result["description"] = description

    if field_type == FieldType.FLAG.value:
        labels = _get(raw, "flagLabels")
        if (
            isinstance(labels, dict)
            and isinstance(labels.get("clear"), str)
            and isinstance(labels.get("set"), str)
        ):
            result["flagLabels"] = {"clear": labels["clear"], "set": labels["set"]}

    elif field_type == FieldType.ENUM.value:
        entries = _get(raw, "enumEntries")
        result["enumEntries"] = [
            {"value": e["value"], "name": e["name"]}
            for e in (entries if isinstance(entries, list) else [])
            if isinstance(e, dict) and _is_int(e.get("value")) and isinstance(e.get("name"), str)
        ]

    elif field_type == FieldType.INTEGER.value:
        signedness = raw.get("signedness")
        if isinstance(signedness, str) and signedness in _SIGNEDNESS:
            result["signedness"] = signedness
        elif isinstance(raw.get("signed"), bool):
            result["signed"] = raw["signed"]

    elif field_type == FieldType.FLOAT.value:
        float_type = _get(raw, "floatType")
        if not isinstance(float_type, str) or float_type not in _FLOAT_TYPES:
            float_type = FloatType.SINGLE.value
        result["floatType"] = float_type

    elif field_type == FieldType.FIXED_POINT.value:
        q_format = _get(raw, "qFormat")
        if isinstance(q_format, dict) and _is_int(q_format.get("m")) and _is_int(q_format.get("n")):
            result["qFormat"] = {"m": q_format["m"], "n": q_format["n"]}
        else:
            result["qFormat"] = {"m": 0, "n": 0}

    return result


def sanitize_register(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only known register attributes, defaulting anything malformed."""
    reg_id = raw.get("id")
    name = raw.get("name")
    width = raw.get("width")
    offset = raw.get("offset")
    description = raw.get("description")
    raw_fields = raw.get("fields")

    return filter_none(
        {
            "id": reg_id if isinstance(reg_id, str) and reg_id else new_id(),
            "name": name if isinstance(name, str) else "",
            "description": description if isinstance(description, str) else None,
            "width": width if _is_int(width) else 0,
            "offset": offset if _is_int(offset) else None,
            "fields": [
                _sanitize_field(f)
                for f in (raw_fields if isinstance(raw_fields, list) else [])
                if isinstance(f, dict)
            ],
        }
    )


def _parse_register_value(raw: Any, register: RegisterDef) -> int:
    """Parse a stored value (``0x`` string or int), masked to the register width."""
    if _is_int(raw):
        value = raw
    else:
        value = parse_integer(str(raw))
        if value is None:
            logger.warning("Malformed value %r for register '%s', using 0", raw, register.name)
            return 0
    if value < 0:
        logger.warning("Negative value %r for register '%s', using 0", raw, register.name)
        return 0
    return value & register.mask


class ProjectParser:
    """
    Parser for register project files (JSON or YAML).

    Handles:
    - File loading with syntax error reporting
    - Per-register sanitization and validation
    - Value resolution by register id or name
    """

    def __init__(self):
        self._current_file: Optional[Path] = None

    def parse_file(self, file_path: Union[str, Path]) -> ImportResult:
        """
        Parse a project file.

        Args:
            file_path: Path to a ``.json``, ``.yml`` or ``.yaml`` file

        Returns:
            ImportResult with the loaded project and any skipped registers

        Raises:
            ParseError: If the file cannot be read or is not a project document
        """
        file_path = Path(file_path).resolve()
        self._current_file = file_path

        if not file_path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ParseError(f"Cannot read file: {e}", file_path)

        return self.parse_text(text, file_path)

    def parse_text(self, text: str, file_path: Optional[Path] = None) -> ImportResult:
        """Parse project document text (JSON is accepted as YAML)."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            line_num = mark.line + 1 if mark else None
            column = mark.column + 1 if mark else None
            problem = getattr(e, "problem", None) or e
            raise ParseError(f"Syntax error: {problem}", file_path, line_num, column)

        if not isinstance(data, dict):
            raise ParseError(
                f"Root element must be an object/dictionary, got {type(data).__name__}", file_path
            )

        return self.import_data(data, file_path)

    def import_data(self, data: Dict[str, Any], file_path: Optional[Path] = None) -> ImportResult:
        """
        Build a project from an already-parsed document.

        Raises:
            ParseError: If ``registers`` is missing or not a list
        """
        raw_registers = data.get("registers")
        if raw_registers is None:
            raise ParseError("Missing required list", file_path, key_path=["registers"])
        if not isinstance(raw_registers, list):
            raise ParseError(
                f"Expected a list, got {type(raw_registers).__name__}",
                file_path,
                key_path=["registers"],
            )

        registers: List[RegisterDef] = []
        warnings: List[RegisterImportWarning] = []

        for idx, raw in enumerate(raw_registers):
            if not isinstance(raw, dict):
                logger.debug("Ignoring non-object register entry at index %d", idx)
                continue

            sanitized = sanitize_register(raw)
            label = sanitized["name"] or f"(index {idx})"
            try:
                register = RegisterDef.model_validate(sanitized)
            except PydanticValidationError as e:
                errors = [
                    ValidationError(
                        severity="error",
                        message=err["msg"],
                        location=format_key_path(["registers", idx, *err["loc"]]),
                    )
                    for err in e.errors()
                ]
                warnings.append(RegisterImportWarning(idx, label, errors))
                logger.warning("Skipping register %s: %d error(s)", label, len(errors))
                continue

            is_valid, errors, _ = validate_register_def(register)
            if not is_valid:
                warnings.append(RegisterImportWarning(idx, label, errors))
                logger.warning("Skipping register %s: %d error(s)", label, len(errors))
                continue

            registers.append(register)

        values = self._resolve_values(_get(data, "registerValues"), registers)

        address_unit_bits = _get(data, "addressUnitBits")
        if not _is_int(address_unit_bits) or address_unit_bits not in ADDRESS_UNIT_BITS_VALUES:
            if address_unit_bits is not None:
                logger.warning(
                    "Unsupported addressUnitBits %r, using %d",
                    address_unit_bits,
                    ADDRESS_UNIT_BITS_DEFAULT,
                )
            address_unit_bits = ADDRESS_UNIT_BITS_DEFAULT

        metadata = None
        if isinstance(data.get("project"), dict):
            metadata = ProjectMetadata.model_validate(data["project"])
            if metadata.is_empty:
                metadata = None

        project = Project(
            registers=registers,
            values=values,
            metadata=metadata,
            address_unit_bits=address_unit_bits,
        )
        return ImportResult(project=project, warnings=warnings)

    @staticmethod
    def _resolve_values(raw_values: Any, registers: List[RegisterDef]) -> Dict[str, int]:
        """Map ``registerValues`` keys (register id or name) to register ids."""
        if not isinstance(raw_values, dict):
            return {}

        by_id = {reg.id: reg for reg in registers}
        by_name = {reg.name: reg for reg in registers}

        values = {}
        for key, raw in raw_values.items():
            register = by_id.get(key) or by_name.get(key)
            if register is None:
                logger.debug("No register for value key %r", key)
                continue
            values[register.id] = _parse_register_value(raw, register)
        return values


def _strip_ids(register: RegisterDef) -> Dict[str, Any]:
    data = register.model_dump(by_alias=True, exclude_none=True, mode="json")
    data.pop("id", None)
    for fld in data.get("fields", []):
        fld.pop("id", None)
    return data


def export_project(project: Project) -> Dict[str, Any]:
    """
    Convert a project to its file representation.

    Ids are stripped and values are keyed by register name as ``0x`` hex, so
    the output is stable across load/save cycles.
    """
    data: Dict[str, Any] = {
        "version": PROJECT_FILE_VERSION,
        "registers": [_strip_ids(reg) for reg in project.registers],
        "registerValues": {
            reg.name: format_hex_value(project.values[reg.id])
            for reg in project.registers
            if reg.id in project.values
        },
    }
    if project.metadata is not None and not project.metadata.is_empty:
        data["project"] = project.metadata.model_dump(by_alias=True, exclude_none=True)
    if project.address_unit_bits != ADDRESS_UNIT_BITS_DEFAULT:
        data["addressUnitBits"] = project.address_unit_bits
    return data


def dump_project(project: Project, fmt: str = "yaml") -> str:
    """Serialize a project as ``"yaml"`` or ``"json"`` text."""
    data = export_project(project)
    if fmt == "json":
        return json.dumps(data, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    raise ValueError(f"Unsupported format: {fmt}")


def registers_equal(a: RegisterDef, b: RegisterDef) -> bool:
    """Structural equality of two definitions, ids included."""
    return a.model_dump() == b.model_dump()


def create_seed_registers() -> List[RegisterDef]:
    """Example register used to populate an empty project."""
    return [
        RegisterDef.model_validate(
            {
                "name": "STATUS_REG",
                "description": "Example: device status register",
                "width": 32,
                "offset": 0x00,
                "fields": [
                    {
                        "name": "ENABLE",
                        "description": "Device enable flag",
                        "msb": 0,
                        "lsb": 0,
                        "type": "flag",
                    },
                    {
                        "name": "READY",
                        "description": "Device ready flag",
                        "msb": 1,
                        "lsb": 1,
                        "type": "flag",
                    },
                    {
                        "name": "MODE",
                        "description": "Operating mode",
                        "msb": 4,
                        "lsb": 2,
                        "type": "enum",
                        "enumEntries": [
                            {"value": 0, "name": "IDLE"},
                            {"value": 1, "name": "RUN"},
                            {"value": 2, "name": "SLEEP"},
                            {"value": 3, "name": "STANDBY"},
                            {"value": 4, "name": "TEST"},
                        ],
                    },
                    {
                        "name": "ERROR_CODE",
                        "description": "Last error code",
                        "msb": 11,
                        "lsb": 8,
                        "type": "integer",
                        "signedness": "unsigned",
                    },
                    {
                        "name": "TEMPERATURE",
                        "description": "Temperature reading (signed)",
                        "msb": 23,
                        "lsb": 16,
                        "type": "integer",
                        "signedness": "twos-complement",
                    },
                    {
                        "name": "GAIN",
                        "description": "Gain coefficient (Q4.4 fixed-point)",
                        "msb": 31,
                        "lsb": 24,
                        "type": "fixed-point",
                        "qFormat": {"m": 4, "n": 4},
                    },
                ],
            }
        )
    ]
