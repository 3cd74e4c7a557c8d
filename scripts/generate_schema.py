import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from regcraft.model.project import ADDRESS_UNIT_BITS_VALUES, ProjectMetadata
from regcraft.model.register import RegisterDef


def generate_schema():
    output_dir = project_root / "schemas"
    output_dir.mkdir(parents=True, exist_ok=True)

    # Single register definition
    try:
        register_schema = RegisterDef.model_json_schema(by_alias=True)
        with open(output_dir / "register.schema.json", "w") as f:
            json.dump(register_schema, f, indent=2)
            f.write("\n")
        print(f"Generated {output_dir / 'register.schema.json'}")
    except Exception as e:
        print(f"Error generating RegisterDef schema: {e}")

    # Project file: registers plus values keyed by register name or id
    try:
        register_schema = RegisterDef.model_json_schema(
            by_alias=True, ref_template="#/$defs/{model}"
        )
        defs = register_schema.pop("$defs", {})
        defs["RegisterDef"] = register_schema
        defs["ProjectMetadata"] = ProjectMetadata.model_json_schema(by_alias=True)
        project_schema = {
            "type": "object",
            "description": "Register project file (*.json, *.yml)",
            "properties": {
                "version": {"type": "integer", "const": 1},
                "registers": {"type": "array", "items": {"$ref": "#/$defs/RegisterDef"}},
                "registerValues": {
                    "type": "object",
                    "additionalProperties": {"type": "string", "pattern": "^0x[0-9a-fA-F]+$"},
                },
                "project": {"$ref": "#/$defs/ProjectMetadata"},
                "addressUnitBits": {"enum": list(ADDRESS_UNIT_BITS_VALUES)},
            },
            "required": ["registers"],
            "$defs": defs,
        }
        with open(output_dir / "project.schema.json", "w") as f:
            json.dump(project_schema, f, indent=2)
            f.write("\n")
        print(f"Generated {output_dir / 'project.schema.json'}")
    except Exception as e:
        print(f"Error generating project schema: {e}")


if __name__ == "__main__":
    generate_schema()
