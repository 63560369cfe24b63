"""Generate JSON Schema and docs for the assertion schema format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import yaml

from assertkit.config import SchemaNode


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_schema_file(path: Path) -> SchemaNode:
    """Read a schema document (YAML or JSON) into a ``SchemaNode``.

    Raises ValueError when the file is not a mapping or not a valid schema.
    """
    # JSON is a subset of YAML, so one parser covers both
    raw: Any = yaml.safe_load(path.read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")
    return SchemaNode.model_validate(raw)


def generate_json_schema() -> dict:
    return SchemaNode.model_json_schema(by_alias=True)


def write_json_schema(path: Path) -> None:
    _ensure_parent(path)
    schema = generate_json_schema()
    path.write_text(json.dumps(schema, indent=2) + "\n")


def _format_fields(fields: Iterable[str]) -> str:
    return ", ".join(f"`{f}`" for f in fields)


def generate_schema_doc() -> str:
    schema = generate_json_schema()
    # Self-referencing models are emitted as a $ref into $defs
    ref = schema.get("$ref", "")
    if ref.startswith("#/$defs/"):
        schema = schema["$defs"][ref.removeprefix("#/$defs/")]
    props = schema.get("properties", {})
    type_values = props.get("type", {}).get("enum", [])

    constraints = {
        "object": ["properties", "required"],
        "array": ["items"],
        "string": ["pattern", "minLength", "maxLength", "enum"],
        "number": ["minimum", "maximum"],
        "boolean": [],
    }

    lines: list[str] = []
    lines.append("# assertkit schema format")
    lines.append("")
    lines.append("This doc is generated from the Pydantic models.")
    lines.append("")
    lines.append(f"- `type`: string (required) - one of: {', '.join(type_values)}")
    lines.append("")
    lines.append("## Constraints by type")
    for type_name, fields in constraints.items():
        known = [f for f in fields if f in props]
        lines.append(f"- `{type_name}`: {_format_fields(known) if known else 'no constraints'}")
    lines.append("")
    lines.append("Properties not declared under `properties` are never reported.")
    lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    _ensure_parent(path)
    path.write_text(generate_schema_doc())
